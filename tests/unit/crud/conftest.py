"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import SQLModel, Session

from guidebook.crud.database import init_db, make_engine
from guidebook.crud.models import Tag


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created and foreign keys enforced."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="tags")
def tags_fixture(session):
    """Three persisted tags, keyed by slug."""
    out = {}
    for name, color in [("Python", "#3572a5"), ("Beginner", "#00ff00"), ("Advanced", "#ff0000")]:
        tag = Tag(name=name, slug=name.lower(), color=color)
        session.add(tag)
        out[tag.slug] = tag
    session.flush()
    return out
