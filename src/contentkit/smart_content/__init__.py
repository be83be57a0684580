"""Smart content data providers."""

from contentkit.smart_content.configuration import ConfigurationBuilder, ProviderConfiguration, SortOption
from contentkit.smart_content.engine import DataProviderEngine, DataProviderRepository, compute_window
from contentkit.smart_content.media import (
    ALL_COLLECTIONS_TITLE,
    ROOT_DATASOURCE,
    CollectionManager,
    MediaDataItem,
    MediaDataProvider,
)
from contentkit.smart_content.models import (
    ArrayAccessItem,
    DataProviderResult,
    DatasourceItem,
    PropertyParameter,
    ReferenceStore,
)

__all__ = [
    "ALL_COLLECTIONS_TITLE",
    "ArrayAccessItem",
    "CollectionManager",
    "ConfigurationBuilder",
    "DataProviderEngine",
    "DataProviderRepository",
    "DataProviderResult",
    "DatasourceItem",
    "MediaDataItem",
    "MediaDataProvider",
    "PropertyParameter",
    "ProviderConfiguration",
    "ROOT_DATASOURCE",
    "ReferenceStore",
    "SortOption",
    "compute_window",
]
