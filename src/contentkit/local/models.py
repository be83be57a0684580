"""Template definitions and documents of a local content workspace."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from contentkit.content.models import Metadata, Property, SectionProperty, Tag
from contentkit.content.structure import DEFAULT_CACHE_LIFETIME


class TagDefinition(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    priority: Optional[int] = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class PropertyDefinition(BaseModel):
    """Declaration of one property in a template file."""

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str = "text_line"
    mandatory: bool = False
    multilingual: bool = True
    min_occurs: Optional[int] = None
    max_occurs: Optional[int] = None
    params: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, dict[str, str]] = Field(default_factory=dict)
    tags: list[TagDefinition] = Field(default_factory=list)

    def build(self) -> Property:
        return Property(
            name=self.name,
            content_type_name=self.type,
            tags=[Tag(tag.name, tag.priority, dict(tag.attributes)) for tag in self.tags],
            mandatory=self.mandatory,
            multilingual=self.multilingual,
            min_occurs=self.min_occurs,
            max_occurs=self.max_occurs,
            params=dict(self.params),
            metadata=Metadata(self.meta),
        )


class SectionDefinition(BaseModel):
    """Declaration of a section grouping child properties."""

    model_config = ConfigDict(extra="forbid")

    section: str
    meta: dict[str, dict[str, str]] = Field(default_factory=dict)
    properties: list[PropertyDefinition] = Field(default_factory=list)

    def build(self) -> SectionProperty:
        return SectionProperty(
            name=self.section,
            child_properties=[definition.build() for definition in self.properties],
            metadata=Metadata(self.meta),
        )


class TemplateDefinition(BaseModel):
    """Template a structure is instantiated from."""

    model_config = ConfigDict(extra="forbid")

    key: str
    view: Optional[str] = None
    controller: Optional[str] = None
    cache_lifetime: int = DEFAULT_CACHE_LIFETIME
    meta: dict[str, dict[str, str]] = Field(default_factory=dict)
    body: Optional[str] = Field(None, description="Property receiving the Markdown body of a document")
    properties: list[Union[PropertyDefinition, SectionDefinition]] = Field(default_factory=list)

    def build_properties(self) -> list[Union[Property, SectionProperty]]:
        """Return fresh property instances in declaration order."""

        return [definition.build() for definition in self.properties]

    def iter_property_definitions(self) -> Iterable[PropertyDefinition]:
        for definition in self.properties:
            if isinstance(definition, SectionDefinition):
                yield from definition.properties
            else:
                yield definition


@dataclass(slots=True)
class LocalDocumentMetadata:
    """Metadata persisted in the frontmatter of a local document file."""

    template: str
    uuid: Optional[str] = None
    language: Optional[str] = None
    webspace: Optional[str] = None
    origin_template: Optional[str] = None
    node_state: str = "test"
    node_type: str = "content"
    internal_link: Optional[str] = None
    internal: Optional[bool] = None
    nav_contexts: list[str] = field(default_factory=list)
    is_shadow: Optional[bool] = None
    shadow_base_language: str = ""
    shadow_languages: list[str] = field(default_factory=list)
    concrete_languages: list[str] = field(default_factory=list)
    creator: Optional[int] = None
    changer: Optional[int] = None
    created: Optional[datetime] = None
    changed: Optional[datetime] = None
    published: Optional[datetime] = None
    ext: dict[str, dict[str, Any]] = field(default_factory=dict)
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class LocalDocument:
    """Representation of a document stored on disk."""

    path: Path
    metadata: LocalDocumentMetadata
    body: str
    children: list["LocalDocument"] = field(default_factory=list)

    @property
    def uuid(self) -> Optional[str]:
        return self.metadata.uuid

    @property
    def directory(self) -> Path:
        return self.path.parent
