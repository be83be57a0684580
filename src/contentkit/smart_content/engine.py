"""Shared filter and pagination engine behind every smart content provider."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel

from .configuration import ProviderConfiguration
from .models import ArrayAccessItem, DataProviderResult, ReferenceStore

logger = logging.getLogger(__name__)


class DataProviderRepository(Protocol):
    """Storage collaborator that executes the actual filter query."""

    def find_by_filters(
        self,
        filters: Mapping[str, Any],
        *,
        offset: int,
        max_results: Optional[int],
        locale: Optional[str],
        options: Mapping[str, Any],
    ) -> Sequence[Any]:
        ...


Serializer = Callable[[Any, Optional[str]], Mapping[str, Any]]
Decorator = Callable[[list[Any]], list[Any]]


def serialize_resource(resource: Any, locale: Optional[str] = None) -> dict[str, Any]:
    """Default serializer turning a repository record into plain data."""

    if isinstance(resource, BaseModel):
        return resource.model_dump()
    if dataclasses.is_dataclass(resource) and not isinstance(resource, type):
        return dataclasses.asdict(resource)
    if isinstance(resource, Mapping):
        return dict(resource)
    raise TypeError(f"Cannot serialize resource of type {type(resource).__name__}")


def compute_window(
    limit: Optional[int],
    page: Optional[int],
    page_size: Optional[int],
) -> Optional[tuple[int, Optional[int]]]:
    """Return ``(offset, max_results)`` for the repository, or None if nothing fits.

    One extra row is requested on paginated queries so the caller can tell
    whether another page exists. ``limit`` caps the absolute number of rows
    across all pages.
    """

    if page is not None and page_size is not None and page_size > 0:
        offset = (max(page, 1) - 1) * page_size
        if limit is not None and page_size >= limit - offset:
            max_results = limit - offset
        else:
            max_results = page_size + 1
        if max_results <= 0:
            return None
        return offset, max_results

    if limit is not None:
        if limit <= 0:
            return None
        return 0, limit
    return 0, None


def _get_id(resource: Any) -> str:
    if isinstance(resource, Mapping):
        return str(resource["id"])
    return str(resource.id)


class DataProviderEngine:
    """Apply filters and paging through a repository and shape the results.

    Specializations supply the repository, their capability configuration
    and a decorator wrapping raw records into presentation items.
    """

    def __init__(
        self,
        repository: DataProviderRepository,
        configuration: ProviderConfiguration,
        *,
        decorator: Decorator,
        serializer: Serializer = serialize_resource,
        reference_store: Optional[ReferenceStore] = None,
    ) -> None:
        self.repository = repository
        self.configuration = configuration
        self.decorator = decorator
        self.serializer = serializer
        self.reference_store = reference_store if reference_store is not None else ReferenceStore()

    def resolve_data_items(
        self,
        filters: Mapping[str, Any],
        *,
        locale: Optional[str],
        options: Mapping[str, Any],
        limit: Optional[int] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> DataProviderResult:
        items, has_next_page = self._resolve_filters(filters, locale, options, limit, page, page_size)
        return DataProviderResult(self.decorator(items), has_next_page)

    def resolve_resource_items(
        self,
        filters: Mapping[str, Any],
        *,
        locale: Optional[str],
        options: Mapping[str, Any],
        limit: Optional[int] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> DataProviderResult:
        items, has_next_page = self._resolve_filters(filters, locale, options, limit, page, page_size)
        return DataProviderResult(self._decorate_resource_items(items, locale), has_next_page)

    def _decorate_resource_items(self, items: list[Any], locale: Optional[str]) -> list[ArrayAccessItem]:
        result: list[ArrayAccessItem] = []
        for item in items:
            resource_id = _get_id(item)
            self.reference_store.add(resource_id)
            result.append(ArrayAccessItem(resource_id, self.serializer(item, locale), item))
        return result

    def _resolve_filters(
        self,
        filters: Mapping[str, Any],
        locale: Optional[str],
        options: Mapping[str, Any],
        limit: Optional[int],
        page: Optional[int],
        page_size: Optional[int],
    ) -> tuple[list[Any], bool]:
        window = compute_window(limit, page, page_size)
        if window is None:
            logger.debug("Page %s of size %s lies beyond limit %s", page, page_size, limit)
            return [], False

        offset, max_results = window
        logger.debug("Querying repository at offset %d for at most %s rows", offset, max_results)
        result = list(
            self.repository.find_by_filters(
                filters,
                offset=offset,
                max_results=max_results,
                locale=locale,
                options=options,
            )
        )

        has_next_page = False
        if page_size and len(result) > page_size:
            has_next_page = True
            result = result[:page_size]
        return result, has_next_page
