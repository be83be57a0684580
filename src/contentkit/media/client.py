"""HTTP client wrapper for the media catalogue REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional
from urllib.parse import urljoin

import httpx

from contentkit.errors import DatasourceNotFoundError

from .models import Collection, Media

logger = logging.getLogger(__name__)


ROOT_COLLECTION = "root"
DEFAULT_PAGE_LIMIT = 100


@dataclass(slots=True)
class MediaApiAuth:
    """Authentication payload used by the media client."""

    username: str
    api_token: str


def build_query_params(
    filters: Mapping[str, Any],
    *,
    offset: int,
    max_results: Optional[int],
    locale: Optional[str],
    options: Mapping[str, Any],
) -> dict[str, object]:
    """Translate smart content filters into query parameters of ``GET media``."""

    params: dict[str, object] = {"offset": offset}
    if max_results is not None:
        params["limit"] = max_results
    if locale:
        params["locale"] = locale

    datasource = filters.get("dataSource")
    if datasource and str(datasource) != ROOT_COLLECTION:
        params["collection"] = str(datasource)
        if filters.get("includeSubFolders"):
            params["includeSubFolders"] = "true"

    for key, operator_key in (
        ("tags", "tagOperator"),
        ("websiteTags", "websiteTagsOperator"),
        ("categories", "categoryOperator"),
        ("websiteCategories", "websiteCategoriesOperator"),
    ):
        values = filters.get(key)
        if values:
            params[key] = ",".join(str(value) for value in values)
            params[operator_key] = str(filters.get(operator_key) or "or").lower()

    if filters.get("targetGroupId"):
        params["targetGroup"] = filters["targetGroupId"]
    if filters.get("sortBy"):
        params["sortBy"] = filters["sortBy"]
        params["sortOrder"] = str(filters.get("sortMethod") or "asc").lower()

    # Extra scalar options such as mimetype and type become query parameters.
    for key, value in options.items():
        if key == "locale" or key in params or not value:
            continue
        if isinstance(value, (str, int, float)):
            params[key] = value
    return params


class MediaApiClient:
    """Thin wrapper above the media catalogue REST API.

    Implements both the data provider repository and the collection lookup
    used to resolve datasources.
    """

    def __init__(
        self,
        *,
        base_url: str,
        auth: MediaApiAuth,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        api_root = urljoin(base_url.rstrip("/") + "/", "admin/api/")
        self._client = httpx.Client(
            base_url=api_root,
            timeout=timeout,
            auth=(auth.username, auth.api_token),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MediaApiClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401 - standard context manager signature
        self.close()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, url: str, **kwargs) -> dict:
        logger.debug("%s %s %s", method, url, kwargs.get("params"))
        response = self._client.request(method, url, **kwargs)
        response.raise_for_status()
        return response.json()

    def _iter_paginated(self, url: str, *, params: Optional[dict] = None) -> Iterator[dict]:
        next_url = url
        next_params = params
        while next_url:
            data = self._request("GET", next_url, params=next_params)
            for result in data.get("results", []):
                yield result
            next_link = data.get("_links", {}).get("next")
            if not next_link:
                break
            next_url = next_link
            next_params = None

    # ------------------------------------------------------------------
    # Parsers
    # ------------------------------------------------------------------
    @staticmethod
    def _to_media(data: dict) -> Media:
        collection = data.get("collection") or {}
        return Media(
            id=str(data["id"]),
            title=data.get("title", ""),
            collection_id=_as_optional_str(collection.get("id")),
            mimetype=data.get("mimeType", ""),
            type=(data.get("type") or {}).get("name", ""),
            url=data.get("url"),
            locale=data.get("locale"),
            description=data.get("description"),
            tags=[str(tag) for tag in data.get("tags", [])],
            categories=[str(category) for category in data.get("categories", [])],
            target_groups=[str(group) for group in data.get("targetGroups", [])],
            thumbnails=dict(data.get("thumbnails") or {}),
        )

    @staticmethod
    def _to_collection(data: dict) -> Collection:
        parent = data.get("parent") or {}
        return Collection(
            id=str(data["id"]),
            title=data.get("title", ""),
            key=data.get("key"),
            parent_id=_as_optional_str(parent.get("id")),
            locale=data.get("locale"),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def find_by_filters(
        self,
        filters: Mapping[str, Any],
        *,
        offset: int,
        max_results: Optional[int],
        locale: Optional[str],
        options: Mapping[str, Any],
    ) -> list[Media]:
        params = build_query_params(
            filters,
            offset=offset,
            max_results=max_results,
            locale=locale,
            options=options,
        )
        data = self._request("GET", "media", params=params)
        return [self._to_media(result) for result in data.get("results", [])]

    def get_media(self, media_id: str, *, locale: Optional[str] = None) -> Media:
        params = {"locale": locale} if locale else None
        return self._to_media(self._request("GET", f"media/{media_id}", params=params))

    def get_by_id(self, collection_id: str, locale: Optional[str]) -> Collection:
        params = {"locale": locale} if locale else None
        try:
            data = self._request("GET", f"collections/{collection_id}", params=params)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise DatasourceNotFoundError(collection_id) from exc
            raise
        return self._to_collection(data)

    def iter_collections(self, *, locale: Optional[str] = None) -> Iterator[Collection]:
        params: dict[str, object] = {"limit": DEFAULT_PAGE_LIMIT}
        if locale:
            params["locale"] = locale
        for result in self._iter_paginated("collections", params=params):
            yield self._to_collection(result)


def _as_optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def create_client(
    *,
    base_url: str,
    username: str,
    api_token: str,
    transport: Optional[httpx.BaseTransport] = None,
) -> MediaApiClient:
    auth = MediaApiAuth(username=username, api_token=api_token)
    return MediaApiClient(base_url=base_url, auth=auth, transport=transport)
