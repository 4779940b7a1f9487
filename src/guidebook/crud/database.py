"""Engine construction, schema creation, and session helpers"""

import os

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from guidebook.crud import models  # noqa: F401  (registers tables on SQLModel.metadata)


DEFAULT_URL = "sqlite:///guidebook.db"


def get_url(explicit: str | None = None) -> str:
    """Explicit URL, else GUIDEBOOK_DB_URL, else the local SQLite default."""
    if explicit:
        return explicit
    return os.getenv("GUIDEBOOK_DB_URL") or DEFAULT_URL


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str):
    """Create an engine; SQLite connections enforce ON DELETE CASCADE."""
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, echo=False, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(engine):
    with Session(engine) as session:
        yield session
