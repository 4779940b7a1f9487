"""Tag persistence: list, lookup, create, update, delete"""

import logging

from sqlmodel import Session, col, select

from guidebook.core.utils.slug import slugify
from guidebook.crud.errors import ConflictError, NotFoundError
from guidebook.crud.models import DEFAULT_TAG_COLOR, Tag
from guidebook.crud.schemas import TagCreate, TagRead, TagUpdate


logger = logging.getLogger(__name__)

DEFAULT_TAG_SLUG = "tag"


def list_tags(session: Session) -> list[Tag]:
    """Return all tags ordered by name."""
    return list(session.exec(select(Tag).order_by(col(Tag.name))).all())


def get_tag(session: Session, tag_id: str) -> Tag | None:
    return session.get(Tag, tag_id)


def get_tag_by_slug(session: Session, slug: str) -> Tag | None:
    return session.exec(select(Tag).where(col(Tag.slug) == slug)).first()


def _ensure_unique(session: Session, name: str | None, slug: str | None, exclude_id: str | None = None) -> None:
    """Raise ConflictError if another tag already uses name or slug."""
    if name is not None:
        other = session.exec(select(Tag).where(col(Tag.name) == name)).first()
        if other is not None and other.id != exclude_id:
            raise ConflictError(f"Tag name '{name}' already exists")
    if slug is not None:
        other = get_tag_by_slug(session, slug)
        if other is not None and other.id != exclude_id:
            raise ConflictError(f"Tag slug '{slug}' already exists")


def create_tag(session: Session, data: TagCreate, default_color: str = DEFAULT_TAG_COLOR) -> Tag:
    """Insert a tag; slug derives from the name when not given.

    Flushes but does not commit; caller controls the transaction.
    """
    slug = data.slug or slugify(data.name, default=DEFAULT_TAG_SLUG)
    _ensure_unique(session, data.name, slug)
    tag = Tag(name=data.name, slug=slug, color=data.color or default_color)
    session.add(tag)
    session.flush()
    logger.info("Created tag %s (%s)", tag.id, tag.slug)
    return tag


def update_tag(session: Session, tag_id: str, data: TagUpdate) -> Tag:
    """Apply the explicitly set fields of data. Raises NotFoundError for unknown ids."""
    tag = get_tag(session, tag_id)
    if tag is None:
        raise NotFoundError(f"Tag {tag_id} not found")
    fields = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    _ensure_unique(session, fields.get("name"), fields.get("slug"), exclude_id=tag.id)
    for name, value in fields.items():
        setattr(tag, name, value)
    session.add(tag)
    session.flush()
    return tag


def delete_tag(session: Session, tag_id: str) -> None:
    """Delete a tag and its guide associations."""
    tag = get_tag(session, tag_id)
    if tag is None:
        raise NotFoundError(f"Tag {tag_id} not found")
    session.delete(tag)
    session.flush()
    logger.info("Deleted tag %s", tag_id)


def tag_to_dict(tag: Tag) -> dict:
    """JSON-ready tag view."""
    return TagRead.model_validate(tag).model_dump(mode="json")
