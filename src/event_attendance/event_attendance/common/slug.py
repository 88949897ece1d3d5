from __future__ import annotations

import re
import unicodedata
from typing import Callable


def slugify(title: str, *, fallback: str = "event") -> str:
    """URL-friendly slug: ASCII-folded, lowercase, hyphen separated."""
    normalized = unicodedata.normalize("NFKD", title)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug or fallback


def unique_slug(title: str, is_taken: Callable[[str], bool]) -> str:
    base_slug = slugify(title)
    slug = base_slug
    counter = 1
    while is_taken(slug):
        counter += 1
        slug = f"{base_slug}-{counter}"
    return slug
