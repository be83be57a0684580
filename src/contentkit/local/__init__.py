"""File based templates and content documents."""

from contentkit.local.models import LocalDocument, LocalDocumentMetadata, TemplateDefinition
from contentkit.local.repository import LocalContentRepository, TemplateRegistry

__all__ = [
    "LocalContentRepository",
    "LocalDocument",
    "LocalDocumentMetadata",
    "TemplateDefinition",
    "TemplateRegistry",
]
