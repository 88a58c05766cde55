"""Slug generation for report directory names."""

from __future__ import annotations

import re

DEFAULT_SLUG_MAX_LENGTH = 50


def slugify(value: str, max_length: int | None = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """Generate a filesystem-safe slug from free text.

    Args:
        value: Event name, export label or similar.
        max_length: Maximum slug length. Use None to disable truncation.

    Returns:
        Lowercase slug; "leaderboard" when nothing usable remains.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    if max_length is not None:
        slug = slug[:max_length].rstrip("-")
    return slug or "leaderboard"
