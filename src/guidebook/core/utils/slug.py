"""Slug generation for guide and tag identifiers"""

import re


SLUG_RE = re.compile(r"[^a-z0-9]+")
DEFAULT_SLUG = "guide"


def slugify(text: str, default: str = DEFAULT_SLUG) -> str:
    """Lowercase text, collapse non-alphanumeric runs to '-', trim hyphens.

    Returns `default` when nothing alphanumeric is left.
    """
    slug = SLUG_RE.sub("-", (text or "").lower()).strip("-")
    return slug or default
