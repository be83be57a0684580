"""Content structure model."""

from contentkit.content.models import (
    ExtensionData,
    Metadata,
    NodeState,
    NodeType,
    Property,
    SectionProperty,
    StructureType,
    Tag,
)
from contentkit.content.structure import NODE_NAME_TAG, RESOURCE_LOCATOR_TAG, Structure

__all__ = [
    "ExtensionData",
    "Metadata",
    "NODE_NAME_TAG",
    "NodeState",
    "NodeType",
    "Property",
    "RESOURCE_LOCATOR_TAG",
    "SectionProperty",
    "Structure",
    "StructureType",
    "Tag",
]
