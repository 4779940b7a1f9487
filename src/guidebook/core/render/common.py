"""Helpers shared by the page view and the static export renderers"""

import html
import re
from datetime import date, datetime
from typing import Any, Optional

from guidebook.core.models import ImageData


DEFAULT_TAG_COLOR = "#58a6ff"
CODE_LABEL = "code"
CODE_CLASS = "plaintext"
EMPTY_CONTENT = "This guide has no content yet."

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

CALLOUT_STYLES: dict[str, dict[str, str]] = {
    "note":    {"icon": "✎", "label": "Note"},
    "info":    {"icon": "ℹ", "label": "Info"},
    "warning": {"icon": "⚠", "label": "Warning"},
}


def esc(value: Any) -> str:
    """Escape text for element content and quoted attribute values."""
    return html.escape("" if value is None else str(value), quote=True)


def image_source(data: ImageData) -> Optional[str]:
    """Display URL for an image: file.externalUrl, then file.url, then legacy url."""
    if data.file is not None:
        if data.file.external_url:
            return data.file.external_url
        if data.file.url:
            return data.file.url
    return data.url or None


def callout_style(callout_type: str) -> dict[str, str]:
    return CALLOUT_STYLES.get(callout_type, CALLOUT_STYLES["note"])


def tag_color(color: Optional[str]) -> str:
    """Tag color when it is a well-formed #rrggbb value, else the default."""
    return color if color and HEX_COLOR_RE.match(color) else DEFAULT_TAG_COLOR


def tag_badge(tag: Any) -> str:
    """Inline-styled pill for a tag: tinted background, solid text color."""
    color = tag_color(getattr(tag, "color", None))
    return (
        f'<span class="tag" style="background-color: {color}20; color: {color};">'
        f'{esc(getattr(tag, "name", ""))}</span>'
    )


def format_date(value: Optional[date]) -> str:
    """Human date like 'March 5, 2026'; empty for missing values."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value:%B} {value.day}, {value.year}"
