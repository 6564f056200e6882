"""URL-friendly slugs for category names."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(name: str) -> str:
    """'Food & Dining' -> 'food-dining'. Empty results fall back to 'category'."""
    slug = _NON_ALNUM.sub("-", name.lower()).strip("-")
    return slug or "category"


def unique_slug(base: str, taken: set[str]) -> str:
    """Append -1, -2, ... to ``base`` until it is not in ``taken``."""
    slug = base
    counter = 1
    while slug in taken:
        slug = f"{base}-{counter}"
        counter += 1
    return slug
