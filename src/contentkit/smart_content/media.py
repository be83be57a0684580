"""Smart content data provider listing media of a collection."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol

from contentkit.media.models import Collection, Media

from .configuration import ConfigurationBuilder
from .engine import DataProviderEngine, DataProviderRepository, Serializer, serialize_resource
from .models import DataProviderResult, DatasourceItem, PropertyParameter, ReferenceStore


ROOT_DATASOURCE = "root"
ALL_COLLECTIONS_TITLE = "smart-content.media.all-collections"
EDIT_FORM_VIEW = "contentkit_media.form"
THUMBNAIL_FORMAT = "sulu-50x50"

RequestQuery = Callable[[], Optional[Mapping[str, Any]]]


class CollectionManager(Protocol):
    """Catalogue collaborator resolving collection ids."""

    def get_by_id(self, collection_id: str, locale: Optional[str]) -> Collection:
        ...


class MediaDataItem:
    """Presentation wrapper around a media record."""

    __slots__ = ("_media",)

    def __init__(self, media: Media) -> None:
        self._media = media

    @property
    def id(self) -> str:
        return self._media.id

    @property
    def title(self) -> str:
        return self._media.title

    @property
    def image(self) -> Optional[str]:
        return self._media.thumbnails.get(THUMBNAIL_FORMAT)

    @property
    def resource(self) -> Media:
        return self._media

    def __repr__(self) -> str:
        return f"MediaDataItem(id={self.id!r}, title={self.title!r})"


class MediaDataProvider:
    """List media filtered by collection, tags, categories and audience."""

    def __init__(
        self,
        repository: DataProviderRepository,
        collection_manager: CollectionManager,
        *,
        request_query: Optional[RequestQuery] = None,
        serializer: Serializer = serialize_resource,
        reference_store: Optional[ReferenceStore] = None,
    ) -> None:
        self.configuration = (
            ConfigurationBuilder.create()
            .enable_tags()
            .enable_categories()
            .enable_limit()
            .enable_pagination()
            .enable_present_as()
            .enable_audience_targeting()
            .enable_datasource("collections", "collections", "column_list")
            .enable_sorting([{"column": "fileVersionMeta.title", "title": "contentkit_admin.title"}])
            .enable_view(EDIT_FORM_VIEW, {"id": "id"})
            .get_configuration()
        )
        self.collection_manager = collection_manager
        self._request_query = request_query
        self._engine = DataProviderEngine(
            repository,
            self.configuration,
            decorator=self.decorate_data_items,
            serializer=serializer,
            reference_store=reference_store,
        )

    @property
    def reference_store(self) -> ReferenceStore:
        return self._engine.reference_store

    def get_default_property_parameter(self) -> dict[str, PropertyParameter]:
        return {
            "mimetype_parameter": PropertyParameter("mimetype_parameter", "mimetype", "string"),
            "type_parameter": PropertyParameter("type_parameter", "type", "string"),
        }

    def resolve_datasource(
        self,
        datasource: Optional[str],
        property_parameter: Mapping[str, PropertyParameter],
        options: Mapping[str, Any],
    ) -> Optional[DatasourceItem]:
        """Return the labelled datasource, or None when no datasource is selected.

        Unknown collection ids propagate ``DatasourceNotFoundError``.
        """

        if not datasource:
            return None

        if datasource == ROOT_DATASOURCE:
            return DatasourceItem(ROOT_DATASOURCE, ALL_COLLECTIONS_TITLE, ALL_COLLECTIONS_TITLE)

        entity = self.collection_manager.get_by_id(datasource, options.get("locale"))
        return DatasourceItem(entity.id, entity.title, entity.title)

    def resolve_data_items(
        self,
        filters: Mapping[str, Any],
        property_parameter: Mapping[str, PropertyParameter],
        options: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> DataProviderResult:
        if not filters.get("dataSource"):
            return DataProviderResult([], False)

        options = options or {}
        return self._engine.resolve_data_items(
            filters,
            locale=options.get("locale"),
            options=self.get_options(property_parameter, options),
            limit=limit,
            page=page,
            page_size=page_size,
        )

    def resolve_resource_items(
        self,
        filters: Mapping[str, Any],
        property_parameter: Mapping[str, PropertyParameter],
        options: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> DataProviderResult:
        if not filters.get("dataSource"):
            return DataProviderResult([], False)

        options = options or {}
        return self._engine.resolve_resource_items(
            filters,
            locale=options.get("locale"),
            options=self.get_options(property_parameter, options),
            limit=limit,
            page=page,
            page_size=page_size,
        )

    def get_options(
        self,
        property_parameter: Mapping[str, PropertyParameter],
        options: Optional[Mapping[str, Any]] = None,
    ) -> dict[str, Any]:
        """Merge request bound filters into ``options``; empty values are dropped."""

        request = self._request_query() if self._request_query else None
        query_options: dict[str, Any] = {}
        if request is not None:
            if "mimetype_parameter" in property_parameter:
                query_options["mimetype"] = request.get(property_parameter["mimetype_parameter"].value)
            if "type_parameter" in property_parameter:
                query_options["type"] = request.get(property_parameter["type_parameter"].value)

        merged = dict(options or {})
        merged.update({key: value for key, value in query_options.items() if value})
        return merged

    def decorate_data_items(self, data: list[Media]) -> list[MediaDataItem]:
        return [MediaDataItem(item) for item in data]
