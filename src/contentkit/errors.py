"""Exception hierarchy shared across the package."""

from __future__ import annotations


class ContentKitError(Exception):
    """Base class for all errors raised by contentkit."""


class NoSuchPropertyError(ContentKitError, LookupError):
    """Raised when a property or tag is not registered on a structure."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No property or tag named {name!r}")
        self.name = name


class DatasourceNotFoundError(ContentKitError, LookupError):
    """Raised when a datasource id cannot be resolved in the catalogue."""

    def __init__(self, datasource: str) -> None:
        super().__init__(f"Datasource {datasource!r} does not exist")
        self.datasource = datasource


class TemplateNotFoundError(ContentKitError, LookupError):
    """Raised when a document references an unknown template key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Template {key!r} is not defined")
        self.key = key
