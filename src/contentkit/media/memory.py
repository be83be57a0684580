"""In-memory media catalogue implementing the smart content filter semantics."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from contentkit.errors import DatasourceNotFoundError

from .client import ROOT_COLLECTION
from .models import Collection, Media


class InMemoryMediaRepository:
    """Media and collections held in memory, mainly for tests and previews."""

    def __init__(self, media: Iterable[Media] = (), collections: Iterable[Collection] = ()) -> None:
        self.media = list(media)
        self.collections = {collection.id: collection for collection in collections}

    def get_by_id(self, collection_id: str, locale: Optional[str]) -> Collection:
        try:
            return self.collections[str(collection_id)]
        except KeyError:
            raise DatasourceNotFoundError(collection_id) from None

    def find_by_filters(
        self,
        filters: Mapping[str, Any],
        *,
        offset: int,
        max_results: Optional[int],
        locale: Optional[str],
        options: Mapping[str, Any],
    ) -> list[Media]:
        result = [item for item in self.media if self._matches(item, filters, locale, options)]

        sort_by = filters.get("sortBy")
        if sort_by:
            attribute = str(sort_by).rsplit(".", 1)[-1]
            reverse = str(filters.get("sortMethod") or "asc").lower() == "desc"
            result.sort(key=lambda item: str(getattr(item, attribute, "") or "").lower(), reverse=reverse)

        end = None if max_results is None else offset + max_results
        return result[offset:end]

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------
    def _matches(
        self,
        item: Media,
        filters: Mapping[str, Any],
        locale: Optional[str],
        options: Mapping[str, Any],
    ) -> bool:
        if locale and item.locale and item.locale != locale:
            return False

        datasource = filters.get("dataSource")
        if datasource and str(datasource) != ROOT_COLLECTION:
            allowed = {str(datasource)}
            if filters.get("includeSubFolders"):
                allowed |= self._descendants(str(datasource))
            if item.collection_id not in allowed:
                return False

        for key, operator_key, values in (
            ("tags", "tagOperator", item.tags),
            ("websiteTags", "websiteTagsOperator", item.tags),
            ("categories", "categoryOperator", item.categories),
            ("websiteCategories", "websiteCategoriesOperator", item.categories),
        ):
            wanted = filters.get(key)
            if wanted and not _match_operator(values, wanted, filters.get(operator_key)):
                return False

        target_group = filters.get("targetGroupId")
        if target_group and str(target_group) not in item.target_groups:
            return False

        if options.get("mimetype") and item.mimetype != options["mimetype"]:
            return False
        if options.get("type") and item.type != options["type"]:
            return False
        return True

    def _descendants(self, collection_id: str) -> set[str]:
        found: set[str] = set()
        pending = [collection_id]
        while pending:
            current = pending.pop()
            for candidate in self.collections.values():
                if candidate.parent_id == current and candidate.id not in found:
                    found.add(candidate.id)
                    pending.append(candidate.id)
        return found


def _match_operator(values: Iterable[str], wanted: Iterable[Any], operator: Optional[str]) -> bool:
    present = {str(value) for value in values}
    required = {str(value) for value in wanted}
    if str(operator or "or").lower() == "and":
        return required <= present
    return bool(required & present)
