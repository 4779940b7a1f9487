"""Unit tests for crud/guides.py"""

from datetime import datetime

import pytest
from sqlmodel import select

from guidebook.core.models import DEFAULT_VERSION
from guidebook.crud.errors import ConflictError, NotFoundError
from guidebook.crud.guides import (
    create_guide, delete_guide, get_guide, get_guide_by_slug, guide_to_dict, list_guides, update_guide,
)
from guidebook.crud.models import Guide, GuideTag
from guidebook.crud.schemas import GuideCreate, GuideUpdate
from guidebook.crud.tags import delete_tag, list_tags


CONTENT = {"time": 1, "version": "2.31.0", "blocks": [{"type": "header", "data": {"text": "Hi", "level": 1}}]}


# --- helpers ---

def _make(session, title: str, created_at: datetime = None, tag_ids: list = None, **fields) -> Guide:
    guide = create_guide(session, GuideCreate(title=title, **fields), tag_ids=tag_ids)
    if created_at is not None:
        guide.created_at = created_at
        session.flush()
    return guide


def _tag_slugs(guide: Guide) -> list[str]:
    return [t.slug for t in guide.tags]


# --- create_guide ---

def test_create_guide_defaults(session):
    guide = _make(session, "Getting Started: PK Tips!")
    assert guide.id
    assert guide.slug == "getting-started-pk-tips"
    assert guide.description is None
    assert guide.content["blocks"] == []
    assert guide.content["version"] == DEFAULT_VERSION
    assert guide.tags == []


def test_create_guide_stores_content_as_written(session):
    raw = {"blocks": [{"type": "paragraph", "data": {"text": ""}}]}
    guide = _make(session, "Raw", content=raw)
    assert guide.content == raw


def test_create_guide_with_tags_sorted_by_name(session, tags):
    guide = _make(session, "Tagged", tag_ids=[tags["python"].id, tags["advanced"].id])
    assert _tag_slugs(guide) == ["advanced", "python"]


def test_create_guide_duplicate_tag_ids_collapse(session, tags):
    guide = _make(session, "Dup", tag_ids=[tags["python"].id, tags["python"].id])
    assert _tag_slugs(guide) == ["python"]


def test_create_guide_unknown_tag(session, tags):
    with pytest.raises(NotFoundError, match="nope"):
        _make(session, "Bad", tag_ids=[tags["python"].id, "nope"])
    assert get_guide_by_slug(session, "bad") is None


def test_create_guide_derived_slug_gets_suffix(session):
    first = _make(session, "Intro")
    second = _make(session, "Intro")
    third = _make(session, "intro!")
    assert [first.slug, second.slug, third.slug] == ["intro", "intro-2", "intro-3"]


def test_create_guide_explicit_slug_conflict(session):
    _make(session, "One", slug="shared")
    with pytest.raises(ConflictError):
        _make(session, "Two", slug="shared")


def test_create_guide_untitled_slug(session):
    assert _make(session, "???").slug == "guide"


# --- lookups ---

def test_get_guide(session):
    guide = _make(session, "Lookup")
    assert get_guide(session, guide.id) is guide
    assert get_guide(session, "missing") is None
    assert get_guide_by_slug(session, "lookup") is guide
    assert get_guide_by_slug(session, "missing") is None


# --- list_guides ---

def test_list_guides_newest_first(session):
    _make(session, "Old", created_at=datetime(2024, 1, 1))
    _make(session, "New", created_at=datetime(2026, 1, 1))
    _make(session, "Mid", created_at=datetime(2025, 1, 1))
    assert [g.title for g in list_guides(session)] == ["New", "Mid", "Old"]


def test_list_guides_search_case_insensitive(session):
    _make(session, "Python Basics")
    _make(session, "Advanced python")
    _make(session, "Rust")
    assert sorted(g.title for g in list_guides(session, search="PYTHON")) == ["Advanced python", "Python Basics"]


def test_list_guides_search_wildcards_literal(session):
    _make(session, "100% coverage")
    _make(session, "1000 coverage")
    assert [g.title for g in list_guides(session, search="100%")] == ["100% coverage"]


def test_list_guides_by_tag(session, tags):
    _make(session, "A", tag_ids=[tags["python"].id])
    _make(session, "B", tag_ids=[tags["beginner"].id])
    assert [g.title for g in list_guides(session, tag_id=tags["python"].id)] == ["A"]
    assert list_guides(session, tag_id=tags["advanced"].id) == []


def test_list_guides_search_and_tag_combine(session, tags):
    _make(session, "Python A", tag_ids=[tags["python"].id])
    _make(session, "Python B", tag_ids=[tags["beginner"].id])
    _make(session, "Other", tag_ids=[tags["python"].id])
    result = list_guides(session, search="python", tag_id=tags["python"].id)
    assert [g.title for g in result] == ["Python A"]


# --- update_guide ---

def test_update_guide_fields(session):
    guide = _make(session, "Before")
    before = guide.updated_at
    updated = update_guide(session, guide.id, GuideUpdate(title="After", description="d", content=CONTENT))
    assert (updated.title, updated.description, updated.content) == ("After", "d", CONTENT)
    assert updated.slug == "before"
    assert updated.updated_at >= before


def test_update_guide_omitted_tags_preserved(session, tags):
    guide = _make(session, "G", tag_ids=[tags["python"].id])
    update_guide(session, guide.id, GuideUpdate(title="G2"))
    assert _tag_slugs(guide) == ["python"]


def test_update_guide_tags_replaced(session, tags):
    guide = _make(session, "G", tag_ids=[tags["python"].id, tags["beginner"].id])
    update_guide(session, guide.id, GuideUpdate(), tag_ids=[tags["advanced"].id])
    session.expire_all()
    assert _tag_slugs(get_guide(session, guide.id)) == ["advanced"]
    links = session.exec(select(GuideTag).where(GuideTag.guide_id == guide.id)).all()
    assert [link.tag_id for link in links] == [tags["advanced"].id]


def test_update_guide_empty_tags_clears(session, tags):
    guide = _make(session, "G", tag_ids=[tags["python"].id])
    update_guide(session, guide.id, GuideUpdate(), tag_ids=[])
    session.expire_all()
    assert get_guide(session, guide.id).tags == []


def test_update_guide_unknown_tag_changes_nothing(session, tags):
    guide = _make(session, "G", tag_ids=[tags["python"].id])
    with pytest.raises(NotFoundError):
        update_guide(session, guide.id, GuideUpdate(title="Changed"), tag_ids=["nope"])
    assert guide.title == "G"
    assert _tag_slugs(guide) == ["python"]


def test_update_guide_slug_conflict(session):
    _make(session, "Taken")
    guide = _make(session, "Mine")
    with pytest.raises(ConflictError):
        update_guide(session, guide.id, GuideUpdate(slug="taken"))


def test_update_guide_keeps_own_slug(session):
    guide = _make(session, "Mine")
    assert update_guide(session, guide.id, GuideUpdate(slug="mine")).slug == "mine"


def test_update_guide_null_required_fields_ignored(session):
    guide = _make(session, "Keep", content=CONTENT)
    update_guide(session, guide.id, GuideUpdate(title=None, slug=None, content=None, description=None))
    assert (guide.title, guide.slug, guide.content) == ("Keep", "keep", CONTENT)


def test_update_guide_missing(session):
    with pytest.raises(NotFoundError):
        update_guide(session, "missing", GuideUpdate(title="x"))


# --- delete ---

def test_delete_guide_cascades_links(session, tags):
    guide = _make(session, "Gone", tag_ids=[tags["python"].id])
    guide_id = guide.id
    delete_guide(session, guide_id)
    assert get_guide(session, guide_id) is None
    assert session.exec(select(GuideTag)).all() == []
    assert len(list_tags(session)) == 3


def test_delete_guide_missing(session):
    with pytest.raises(NotFoundError):
        delete_guide(session, "missing")


def test_delete_tag_detaches_from_guides(session, tags):
    guide = _make(session, "G", tag_ids=[tags["python"].id, tags["beginner"].id])
    delete_tag(session, tags["python"].id)
    session.expire_all()
    assert _tag_slugs(get_guide(session, guide.id)) == ["beginner"]


# --- guide_to_dict ---

def test_guide_to_dict(session, tags):
    guide = _make(session, "Export Me", tag_ids=[tags["python"].id], description="d", content=CONTENT)
    data = guide_to_dict(guide)
    assert data["slug"] == "export-me"
    assert data["content"] == CONTENT
    assert data["tags"] == [{"id": tags["python"].id, "name": "Python", "slug": "python", "color": "#3572a5"}]
    assert isinstance(data["created_at"], str)
