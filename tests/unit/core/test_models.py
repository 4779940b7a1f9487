"""Unit tests for core/models.py"""

import pytest
from pydantic import ValidationError

from guidebook.core.models import (
    CodeBlock, Document, HeaderBlock, ImageBlock, ParagraphBlock, UnknownBlock, is_block,
)


def test_document_routes_blocks_by_type():
    doc = Document.model_validate({"time": 1, "blocks": [
        {"type": "header", "data": {"text": "A", "level": 3}},
        {"type": "code", "data": {"code": "x"}},
        {"type": "widget", "data": {"a": 1}},
    ]})
    assert [type(b) for b in doc.blocks] == [HeaderBlock, CodeBlock, UnknownBlock]
    assert doc.blocks[2].type == "widget"


def test_document_rejects_malformed_known_block():
    """Strict models reject what the normalizer would repair."""
    with pytest.raises(ValidationError):
        Document.model_validate({"time": 1, "blocks": [{"type": "header", "data": {"text": ""}}]})


def test_header_level_bounds():
    with pytest.raises(ValidationError):
        HeaderBlock.model_validate({"data": {"text": "A", "level": 7}})


def test_to_content_round_trips():
    content = {"time": 5, "version": "2.31.0", "blocks": [
        {"id": "a", "type": "paragraph", "data": {"text": "p"}},
        {"type": "image", "data": {"file": {"url": "/x.png", "externalUrl": "https://e/x.png"}, "caption": ""}},
    ]}
    assert Document.model_validate(content).to_content() == content


def test_block_to_dict_omits_missing_optional_fields():
    assert CodeBlock().to_dict() == {"type": "code", "data": {"code": ""}}


def test_image_file_accepts_either_name():
    block = ImageBlock.model_validate({"data": {"file": {"url": "u", "external_url": "e"}}})
    assert block.data.file.external_url == "e"
    assert block.to_dict()["data"]["file"] == {"url": "u", "externalUrl": "e"}


@pytest.mark.parametrize("value,block_type,expected", [
    ({"type": "header", "data": {"text": "T", "level": 2}}, "header", True),
    ({"type": "header", "data": {"text": ""}}, "header", False),
    ({"type": "paragraph", "data": {"text": "T"}}, "header", False),
    ({"type": "list", "data": {"items": ["a"]}}, "list", True),
    ({"type": "list", "data": {"items": []}}, "list", False),
    (ParagraphBlock(data={"text": "x"}), "paragraph", True),
    ("header", "header", False),
    ({"type": "widget"}, "widget", False),
])
def test_is_block(value, block_type, expected):
    assert is_block(value, block_type) is expected
