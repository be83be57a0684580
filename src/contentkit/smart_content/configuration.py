"""Capability descriptors of smart content data providers."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class SortOption(BaseModel):
    """Column a provider can sort by, with its translatable label."""

    model_config = ConfigDict(frozen=True)

    column: str
    title: str


class ProviderConfiguration(BaseModel):
    """Static description of the options a provider supports in the admin UI."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tags: bool = False
    categories: bool = False
    limit: bool = False
    paginated: bool = False
    present_as: bool = False
    audience_targeting: bool = False
    datasource_resource_key: Optional[str] = None
    datasource_list_key: Optional[str] = None
    datasource_adapter: Optional[str] = None
    sorting: tuple[SortOption, ...] = ()
    view: Optional[str] = None
    result_to_view: dict[str, str] = Field(default_factory=dict)

    @property
    def has_datasource(self) -> bool:
        return self.datasource_resource_key is not None


class ConfigurationBuilder:
    """Fluent builder for :class:`ProviderConfiguration`."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    @classmethod
    def create(cls) -> "ConfigurationBuilder":
        return cls()

    def enable_tags(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["tags"] = enable
        return self

    def enable_categories(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["categories"] = enable
        return self

    def enable_limit(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["limit"] = enable
        return self

    def enable_pagination(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["paginated"] = enable
        return self

    def enable_present_as(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["present_as"] = enable
        return self

    def enable_audience_targeting(self, enable: bool = True) -> "ConfigurationBuilder":
        self._values["audience_targeting"] = enable
        return self

    def enable_datasource(self, resource_key: str, list_key: str, adapter: str) -> "ConfigurationBuilder":
        self._values.update(
            datasource_resource_key=resource_key,
            datasource_list_key=list_key,
            datasource_adapter=adapter,
        )
        return self

    def enable_sorting(self, sorting: Iterable[Mapping[str, str]]) -> "ConfigurationBuilder":
        self._values["sorting"] = tuple(sorting)
        return self

    def enable_view(self, view: str, result_to_view: Mapping[str, str]) -> "ConfigurationBuilder":
        self._values["view"] = view
        self._values["result_to_view"] = dict(result_to_view)
        return self

    def get_configuration(self) -> ProviderConfiguration:
        return ProviderConfiguration.model_validate(self._values)
