"""Guide persistence: lookup, filtered listing, create/update with tag sets, delete"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from sqlmodel import Session, col, select

from guidebook.core.normalize import empty_document
from guidebook.core.utils.slug import slugify
from guidebook.crud.errors import ConflictError, NotFoundError
from guidebook.crud.models import Guide, GuideTag, Tag
from guidebook.crud.schemas import GuideCreate, GuideRead, GuideUpdate


logger = logging.getLogger(__name__)


def get_guide(session: Session, guide_id: str) -> Guide | None:
    """Return the Guide with the given id, or None if not found."""
    return session.get(Guide, guide_id)


def get_guide_by_slug(session: Session, slug: str) -> Guide | None:
    """Return the Guide with the given slug, or None if not found."""
    return session.exec(select(Guide).where(col(Guide.slug) == slug)).first()


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def list_guides(session: Session, search: Optional[str] = None, tag_id: Optional[str] = None) -> list[Guide]:
    """Return guides newest-created first.

    search: case-insensitive substring match on title.
    tag_id: only guides associated with this tag. Both filters combine.
    """
    stmt = select(Guide)
    if search:
        stmt = stmt.where(col(Guide.title).ilike(_like_pattern(search), escape="\\"))
    if tag_id:
        stmt = stmt.where(col(Guide.id).in_(select(GuideTag.guide_id).where(col(GuideTag.tag_id) == tag_id)))
    stmt = stmt.order_by(col(Guide.created_at).desc(), col(Guide.id))
    return list(session.exec(stmt).all())


def _resolve_tags(session: Session, tag_ids: Iterable[str]) -> list[Tag]:
    """Load tags for ids (duplicates collapsed). Raises NotFoundError listing unknown ids."""
    unique_ids = list(dict.fromkeys(tag_ids))
    tags = [session.get(Tag, tid) for tid in unique_ids]
    missing = [tid for tid, tag in zip(unique_ids, tags) if tag is None]
    if missing:
        raise NotFoundError(f"Tag(s) not found: {', '.join(missing)}")
    return sorted(tags, key=lambda t: t.name)


def _available_slug(session: Session, base: str) -> str:
    """First of base, base-2, base-3, ... not used by any guide."""
    slug, n = base, 1
    while get_guide_by_slug(session, slug) is not None:
        n += 1
        slug = f"{base}-{n}"
    return slug


def _ensure_slug_free(session: Session, slug: str, exclude_id: str | None = None) -> None:
    other = get_guide_by_slug(session, slug)
    if other is not None and other.id != exclude_id:
        raise ConflictError(f"Guide slug '{slug}' already exists")


def create_guide(session: Session, data: GuideCreate, tag_ids: Optional[list[str]] = None) -> Guide:
    """Insert a guide with its tag set.

    An explicit slug must be free (ConflictError otherwise); a slug derived
    from the title gets a numeric suffix when taken. Missing content starts as
    an empty document. Flushes but does not commit.
    """
    tags = _resolve_tags(session, tag_ids or [])
    if data.slug:
        _ensure_slug_free(session, data.slug)
        slug = data.slug
    else:
        slug = _available_slug(session, slugify(data.title))

    guide = Guide(
        title=data.title,
        slug=slug,
        description=data.description,
        content=data.content if data.content is not None else empty_document().to_content(),
    )
    guide.tags = tags
    session.add(guide)
    session.flush()
    logger.info("Created guide %s (%s) with %d tag(s)", guide.id, guide.slug, len(tags))
    return guide


def update_guide(
    session: Session,
    guide_id: str,
    data: GuideUpdate,
    tag_ids: Optional[list[str]] = None,
    ) -> Guide:
    """Apply a partial update and, when tag_ids is given, replace the tag set.

    tag_ids=None leaves associations untouched, [] clears them, a non-empty
    list replaces them wholesale. Fields and tags are written in one flush so
    the caller's commit makes both visible together.
    """
    guide = get_guide(session, guide_id)
    if guide is None:
        raise NotFoundError(f"Guide {guide_id} not found")

    fields = data.model_dump(exclude_unset=True)
    for required in ("title", "slug", "content"):
        if fields.get(required) is None:
            fields.pop(required, None)
    if "slug" in fields:
        _ensure_slug_free(session, fields["slug"], exclude_id=guide.id)
    tags = _resolve_tags(session, tag_ids) if tag_ids is not None else None

    for name, value in fields.items():
        setattr(guide, name, value)
    if tags is not None:
        guide.tags = tags
    guide.updated_at = datetime.now()
    session.add(guide)
    session.flush()
    logger.info("Updated guide %s (fields: %s, tags %s)", guide.id, sorted(fields) or "-",
                "replaced" if tags is not None else "kept")
    return guide


def delete_guide(session: Session, guide_id: str) -> None:
    """Delete a guide and its tag associations."""
    guide = get_guide(session, guide_id)
    if guide is None:
        raise NotFoundError(f"Guide {guide_id} not found")
    session.delete(guide)
    session.flush()
    logger.info("Deleted guide %s", guide_id)


def guide_to_dict(guide: Guide) -> dict:
    """JSON-ready guide-with-tags view."""
    return GuideRead.model_validate(guide).model_dump(mode="json")
