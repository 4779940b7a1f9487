"""Shared fixtures for core unit tests"""

from datetime import date, datetime
from types import SimpleNamespace

import pytest


SAMPLE_CONTENT = {
    "time": 1700000000000,
    "version": "2.31.0",
    "blocks": [
        {"id": "h1", "type": "header", "data": {"text": "Setup", "level": 1}},
        {"id": "p1", "type": "paragraph", "data": {"text": "Install the <b>tools</b> first."}},
        {"id": "c1", "type": "code", "data": {"code": "pip install guidebook", "language": "bash"}},
        {"id": "h2", "type": "header", "data": {"text": "Usage", "level": 2}},
        {"id": "l1", "type": "list", "data": {"style": "ordered", "items": ["One", "Two"]}},
        {"id": "i1", "type": "image", "data": {"file": {"url": "/uploads/images/a.png"}, "caption": "Diagram"}},
        {"id": "n1", "type": "callout", "data": {"text": "Mind the <i>gap</i>", "type": "warning"}},
    ],
}


@pytest.fixture(name="content")
def content_fixture():
    """A raw document exercising every known block type."""
    return {**SAMPLE_CONTENT, "blocks": [dict(b) for b in SAMPLE_CONTENT["blocks"]]}


@pytest.fixture(name="guide")
def guide_fixture(content):
    """A guide-shaped object as the renderers read it (attribute access only)."""
    return SimpleNamespace(
        id="g-1",
        title="Getting Started",
        slug="getting-started",
        description="First steps",
        content=content,
        created_at=datetime(2026, 3, 5, 9, 30),
        tags=[SimpleNamespace(name="Basics", color="#ff0000")],
    )


@pytest.fixture(name="export_date")
def export_date_fixture():
    return date(2026, 3, 5)
