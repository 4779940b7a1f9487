"""Repair persisted or externally supplied content into the canonical Document shape

Every function here is total: malformed, legacy, or garbage input degrades to a
best-effort Document and never raises.
"""

import json
import logging
import math
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from guidebook.core.models import (
    CALLOUT_TYPES, DEFAULT_VERSION, LIST_STYLES,
    CalloutBlock, CalloutData, CodeBlock, CodeData, Document, HeaderBlock, HeaderData,
    ImageBlock, ImageData, ListBlock, ListData, ParagraphBlock, ParagraphData, UnknownBlock,
)
from guidebook.core.sanitize import sanitize_inline


logger = logging.getLogger(__name__)

# Legacy field aliases, highest precedence first.
TEXT_FIELDS = ("text", "content")
CODE_FIELDS = ("code", "text")
LIST_ITEM_FIELDS = ("content", "text")

DEFAULT_LEVEL = 2


def now_ms() -> int:
    """Current time as epoch milliseconds (the editor's `time` unit)."""
    return int(datetime.now().timestamp() * 1000)


def empty_document(now: Optional[int] = None) -> Document:
    """A fresh Document with no blocks and the current format version."""
    return Document(time=now if now is not None else now_ms(), version=DEFAULT_VERSION, blocks=[])


def _stringify(value: Any) -> str:
    """Coerce any JSON-ish value to text the way a browser's String() would."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except ValueError:
        return str(value)


def _text(value: Any) -> str:
    return "" if value is None else _stringify(value)


def _first_truthy(data: dict, fields: Iterable[str]) -> str:
    """First truthy field in the chain, as text; falsy values such as 0 fall through."""
    for name in fields:
        value = data.get(name)
        if value:
            return _text(value)
    return ""


def _first_present(data: dict, fields: Iterable[str]) -> str:
    """First field present (not None) in the chain, even if empty."""
    for name in fields:
        if data.get(name) is not None:
            return _text(data[name])
    return ""


def _level(value: Any) -> int:
    """Heading level as the editor computes it: numeric value, 0 or NaN meaning 2, clamped into [1, 6]."""
    if isinstance(value, bool):
        value = int(value)
    elif isinstance(value, str):
        try:
            value = float(value) if value.strip() else 0
        except ValueError:
            return DEFAULT_LEVEL
    if not isinstance(value, (int, float)) or math.isnan(value) or value == 0:
        return DEFAULT_LEVEL
    return int(max(1, min(6, value)))


def coerce_list_item(item: Any) -> str:
    """String items pass through; {content}/{text} objects are unwrapped; the rest stringified."""
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for name in LIST_ITEM_FIELDS:
            if item.get(name) is not None:
                return _stringify(item[name])
    return _stringify(item)


def _extras(data: dict, known: Iterable[str]) -> dict[str, Any]:
    """Pass-through fields outside the known set; None values carry no information."""
    return {k: v for k, v in data.items() if k not in known and v is not None}


def _header(data: dict, block_id: Optional[str]) -> Optional[HeaderBlock]:
    text = _first_truthy(data, TEXT_FIELDS)
    if not text:
        return None
    return HeaderBlock(id=block_id, data=HeaderData(text=text, level=_level(data.get("level"))))


def _paragraph(data: dict, block_id: Optional[str]) -> Optional[ParagraphBlock]:
    text = sanitize_inline(_first_truthy(data, TEXT_FIELDS))
    if not text:
        return None
    return ParagraphBlock(id=block_id, data=ParagraphData(text=text))


def _code(data: dict, block_id: Optional[str]) -> CodeBlock:
    language = data.get("language")
    return CodeBlock(id=block_id, data=CodeData(
        code=_first_present(data, CODE_FIELDS),
        language=language if isinstance(language, str) and language else None,
    ))


def _list(data: dict, block_id: Optional[str]) -> Optional[ListBlock]:
    raw_items = data.get("items")
    items = [coerce_list_item(i) for i in raw_items] if isinstance(raw_items, list) else []
    if not items:
        return None
    style = data.get("style")
    return ListBlock(id=block_id, data=ListData(
        style=style if style in LIST_STYLES else "unordered",
        items=items,
    ))


def _image(data: dict, block_id: Optional[str]) -> ImageBlock:
    fields = _extras(data, ("file", "url", "caption"))
    file = data.get("file")
    if isinstance(file, dict):
        fields["file"] = {"url": _text(file.get("url"))}
        external = file.get("externalUrl")
        if isinstance(external, str) and external:
            fields["file"]["externalUrl"] = external
    url = data.get("url")
    if isinstance(url, str) and url:
        fields["url"] = url
    fields["caption"] = _text(data.get("caption"))
    return ImageBlock(id=block_id, data=ImageData.model_validate(fields))


def _callout(data: dict, block_id: Optional[str]) -> CalloutBlock:
    fields = _extras(data, ("text", "type"))
    callout_type = data.get("type")
    fields["text"] = sanitize_inline(_text(data.get("text")))
    fields["type"] = callout_type if callout_type in CALLOUT_TYPES else "note"
    return CalloutBlock(id=block_id, data=CalloutData.model_validate(fields))


_NORMALIZERS: dict[str, Callable[[dict, Optional[str]], Any]] = {
    "header":    _header,
    "paragraph": _paragraph,
    "code":      _code,
    "list":      _list,
    "image":     _image,
    "callout":   _callout,
}


def normalize_block(raw: Any):
    """Normalize a single raw block; None means the block is dropped."""
    if not isinstance(raw, dict):
        return None
    block_type = raw.get("type")
    block_id = raw.get("id") if isinstance(raw.get("id"), str) else None
    handler = _NORMALIZERS.get(block_type) if isinstance(block_type, str) else None
    if handler is None:
        return UnknownBlock(
            id=block_id,
            type=block_type if isinstance(block_type, str) else _text(block_type),
            data=raw.get("data"),
        )
    data = raw.get("data")
    return handler(data if isinstance(data, dict) else {}, block_id)


def normalize(raw: Any, now: Optional[int] = None) -> Document:
    """Coerce raw content (mapping, JSON string, Document, or nothing) into a Document.

    Blocks keep their original order; empty headers, paragraphs, and lists are
    dropped, code blocks are always kept. `time` and `version` carry forward
    when valid. `now` supplies the timestamp for content that has none.
    """
    if isinstance(raw, Document):
        raw = raw.to_content()
    elif isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.debug("Content is not valid JSON; starting from an empty document")
            raw = None

    if not isinstance(raw, dict) or not isinstance(raw.get("blocks"), list):
        return empty_document(now)

    blocks = []
    for index, raw_block in enumerate(raw["blocks"]):
        block = normalize_block(raw_block)
        if block is None:
            logger.debug("Dropped invalid or empty block at index %d", index)
            continue
        blocks.append(block)

    time = raw.get("time")
    version = raw.get("version")
    has_time = isinstance(time, (int, float)) and not isinstance(time, bool) and math.isfinite(time)
    return Document(
        time=int(time) if has_time else (now if now is not None else now_ms()),
        version=version if isinstance(version, str) and version else DEFAULT_VERSION,
        blocks=blocks,
    )
