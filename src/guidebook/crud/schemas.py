"""Request and response shapes for guide and tag CRUD"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class GuideCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    content: Optional[dict[str, Any]] = None


class GuideUpdate(BaseModel):
    """Partial update; only fields explicitly set are written."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255, pattern=SLUG_PATTERN)
    description: Optional[str] = None
    content: Optional[dict[str, Any]] = None


class TagCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=100, pattern=SLUG_PATTERN)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=100, pattern=SLUG_PATTERN)
    color: Optional[str] = Field(default=None, pattern=COLOR_PATTERN)


class TagRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    name: str
    slug: str
    color: str


class GuideRead(BaseModel):
    """A guide with its full tag set, as returned to callers."""
    model_config = ConfigDict(from_attributes=True)
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    content: dict[str, Any]
    created_at: datetime
    updated_at: datetime
    tags: list[TagRead] = []
