"""Database table definitions for guides, tags, and their association"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, JSON, String, Text
from sqlmodel import Field, Relationship, SQLModel


DEFAULT_TAG_COLOR = "#58a6ff"


def new_id() -> str:
    return str(uuid4())


class GuideTag(SQLModel, table=True):
    """Many-to-many link between guides and tags; rows go away with either side"""
    __tablename__ = "guide_tags"
    guide_id: str = Field(sa_column=Column(String(36), ForeignKey("guides.id", ondelete="CASCADE"), primary_key=True))
    tag_id: str = Field(sa_column=Column(String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True))


class Guide(SQLModel, table=True):
    """An authored guide; `content` is the persisted document JSON, stored as written"""
    __tablename__ = "guides"
    id: str = Field(default_factory=new_id, sa_column=Column(String(36), primary_key=True))
    title: str = Field(..., sa_column=Column(String(255), nullable=False))
    slug: str = Field(..., sa_column=Column(String(255), nullable=False, unique=True, index=True))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    tags: List["Tag"] = Relationship(
        back_populates="guides",
        link_model=GuideTag,
        sa_relationship_kwargs={"order_by": "Tag.name"},
    )


class Tag(SQLModel, table=True):
    """A label for grouping and filtering guides"""
    __tablename__ = "tags"
    id: str = Field(default_factory=new_id, sa_column=Column(String(36), primary_key=True))
    name: str = Field(..., sa_column=Column(String(100), nullable=False, unique=True))
    slug: str = Field(..., sa_column=Column(String(100), nullable=False, unique=True))
    color: str = Field(default=DEFAULT_TAG_COLOR, sa_column=Column(String(7), nullable=False))
    guides: List[Guide] = Relationship(back_populates="tags", link_model=GuideTag)
