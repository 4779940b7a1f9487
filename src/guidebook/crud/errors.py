"""Store errors surfaced to callers (not-found and uniqueness conflicts)"""


class NotFoundError(LookupError):
    """A guide or tag id does not exist."""


class ConflictError(ValueError):
    """A unique field (slug, tag name) is already taken."""
