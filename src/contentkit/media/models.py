"""Typed models for media catalogue records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class Collection:
    """Folder-like grouping of media that acts as a smart content datasource."""

    id: str
    title: str
    key: Optional[str] = None
    parent_id: Optional[str] = None
    locale: Optional[str] = None


@dataclass(slots=True)
class Media:
    """Single media asset as returned by the catalogue."""

    id: str
    title: str
    collection_id: Optional[str] = None
    mimetype: str = ""
    type: str = ""
    url: Optional[str] = None
    locale: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    target_groups: list[str] = field(default_factory=list)
    thumbnails: dict[str, str] = field(default_factory=dict)
