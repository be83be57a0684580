"""Typed models for the building blocks of a content structure."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator, Mapping, Optional

from pydantic import Field, RootModel

from contentkit.errors import NoSuchPropertyError


DEFAULT_TAG_PRIORITY = 1


class NodeType(enum.IntEnum):
    """Kind of node a structure represents."""

    CONTENT = 1
    INTERNAL_LINK = 2
    EXTERNAL_LINK = 4


class NodeState(enum.IntEnum):
    """Workflow state of a node."""

    TEST = 1
    PUBLISHED = 2
    ARCHIVED = 3


class Metadata:
    """Localized strings keyed by field name and locale."""

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._data = {name: dict(values) for name, values in (data or {}).items()}

    def get(self, name: str, locale: Optional[str], fallback: Any = None) -> Any:
        return self._data.get(name, {}).get(locale, fallback)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {name: dict(values) for name, values in self._data.items()}

    def __repr__(self) -> str:
        return f"Metadata({self._data!r})"


@dataclass(slots=True, frozen=True)
class Tag:
    """Named, prioritised marker attached to a property."""

    name: str
    priority: Optional[int] = None
    attributes: Mapping[str, Any] = field(default_factory=dict)

    @property
    def effective_priority(self) -> int:
        return DEFAULT_TAG_PRIORITY if self.priority is None else self.priority


@dataclass(slots=True, eq=False)
class Property:
    """A single named content field of a structure."""

    is_section: ClassVar[bool] = False

    name: str
    content_type_name: str = "text_line"
    value: Any = None
    tags: list[Tag] = field(default_factory=list)
    mandatory: bool = False
    multilingual: bool = True
    min_occurs: Optional[int] = None
    max_occurs: Optional[int] = None
    params: dict[str, Any] = field(default_factory=dict)
    metadata: Metadata = field(default_factory=Metadata)

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        self.value = value

    def get_tag(self, name: str) -> Tag:
        for tag in self.tags:
            if tag.name == name:
                return tag
        raise NoSuchPropertyError(name)

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    def get_title(self, locale: Optional[str]) -> str:
        return self.metadata.get("title", locale, self.name.capitalize())

    @property
    def is_multiple(self) -> bool:
        return self.min_occurs != self.max_occurs


@dataclass(slots=True, eq=False)
class SectionProperty:
    """Composite property grouping child properties for presentation."""

    is_section: ClassVar[bool] = True

    name: str
    child_properties: list[Property] = field(default_factory=list)
    metadata: Metadata = field(default_factory=Metadata)

    def __iter__(self) -> Iterator[Property]:
        return iter(self.child_properties)

    def get_title(self, locale: Optional[str]) -> str:
        return self.metadata.get("title", locale, self.name.capitalize())


@dataclass(slots=True, frozen=True)
class StructureType:
    """Rendering type of a structure, e.g. a ghost or shadow of another locale."""

    name: str
    value: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"name": self.name, "value": self.value}


class ExtensionData(RootModel[dict[str, dict[str, Any]]]):
    """Namespaced data contributed by structure extensions."""

    root: dict[str, dict[str, Any]] = Field(default_factory=dict)

    def __getitem__(self, namespace: str) -> dict[str, Any]:
        return self.root[namespace]

    def __contains__(self, namespace: object) -> bool:
        return namespace in self.root

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return self.model_dump()
