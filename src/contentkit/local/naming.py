"""Utilities for mapping document titles to directory names and URLs."""

from __future__ import annotations

import re


_NON_WORD_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str, *, fallback: str = "document") -> str:
    """Return a lowercase, hyphen separated slug derived from ``value``.

    The result is used both as directory name and as resource locator
    segment and is capped at 120 characters.
    """

    value = value.lower().strip()
    value = _NON_WORD_RE.sub("-", value)
    value = value.strip("-")
    if not value:
        return fallback
    return value[:120]
