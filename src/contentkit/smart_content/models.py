"""Value objects exchanged between data providers and the templating layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional


@dataclass(slots=True)
class DataProviderResult:
    """Page of decorated items and whether another page follows."""

    items: list[Any] = field(default_factory=list)
    has_next_page: bool = False

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(slots=True, frozen=True)
class DatasourceItem:
    """Labelled scoping root selected for a smart content query."""

    id: str
    title: str
    path: str
    url: Optional[str] = None


@dataclass(slots=True, frozen=True)
class PropertyParameter:
    """Parameter declared on a smart content property."""

    name: str
    value: Any
    type: str = "string"


@dataclass(slots=True)
class ArrayAccessItem:
    """Serialized resource item that still exposes the underlying resource."""

    id: str
    data: Mapping[str, Any]
    resource: Any = None

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class ReferenceStore:
    """Ordered set of resource ids referenced while rendering a response."""

    def __init__(self) -> None:
        self._ids: dict[str, None] = {}

    def add(self, resource_id: str) -> None:
        self._ids[str(resource_id)] = None

    def get_all(self) -> list[str]:
        return list(self._ids)

    def __contains__(self, resource_id: object) -> bool:
        return str(resource_id) in self._ids

    def __len__(self) -> int:
        return len(self._ids)
