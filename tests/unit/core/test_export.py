"""Unit tests for core/render/export.py"""

import re
from html.parser import HTMLParser
from types import SimpleNamespace

from guidebook.core.normalize import normalize
from guidebook.core.render.export import (
    build_body, build_export_html, build_toc_panel, export_filename, export_headers, write_export,
)
from guidebook.core.toc import derive_toc


class _HeadingCollector(HTMLParser):
    """Collect (id, text) for h1-h6 elements that carry an id."""

    def __init__(self):
        super().__init__()
        self.headings: list[tuple[str, str]] = []
        self._current = None

    def handle_starttag(self, tag, attrs):
        if re.fullmatch(r"h[1-6]", tag) and dict(attrs).get("id"):
            self._current = [dict(attrs)["id"], ""]

    def handle_data(self, data):
        if self._current is not None:
            self._current[1] += data

    def handle_endtag(self, tag):
        if self._current is not None and re.fullmatch(r"h[1-6]", tag):
            self.headings.append(tuple(self._current))
            self._current = None


def _headings(html: str) -> list[tuple[str, str]]:
    parser = _HeadingCollector()
    parser.feed(html)
    parser.close()
    return parser.headings


def test_export_is_standalone_document(guide, export_date):
    html = build_export_html(guide, exported_on=export_date)
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Getting Started - Guidebook</title>" in html
    assert "<style>" in html and "function copyCode" in html
    assert "Exported from Guidebook on March 5, 2026" in html


def test_export_headings_match_toc(guide):
    """Every TOC anchor resolves to a heading with the same text."""
    html = build_export_html(guide)
    entries = derive_toc(normalize(guide.content))
    assert _headings(html) == [(e.anchor_id, e.text) for e in entries]
    for e in entries:
        assert f'href="#{e.anchor_id}"' in html


def test_export_escapes_header_text_round_trip():
    guide = SimpleNamespace(title="T", content={"blocks": [
        {"type": "header", "data": {"text": 'A < B & "C"', "level": 2}},
    ]})
    assert _headings(build_export_html(guide)) == [("section-0", 'A < B & "C"')]


def test_export_normalizes_before_numbering():
    """Dropped blocks do not shift export anchors away from the TOC."""
    guide = SimpleNamespace(title="T", content={"blocks": [
        {"type": "paragraph", "data": {"text": ""}},
        {"type": "header", "data": {"text": "Real"}},
    ]})
    assert _headings(build_export_html(guide)) == [("section-0", "Real")]


def test_export_block_markup(guide):
    body = build_body(normalize(guide.content))
    assert "<p>Install the <b>tools</b> first.</p>" in body
    assert '<code id="code-2" class="language-bash">pip install guidebook</code>' in body
    assert "onclick=\"copyCode('code-2', this)\"" in body
    assert "<ol><li>One</li><li>Two</li></ol>" in body
    assert '<img src="/uploads/images/a.png" alt="Diagram" />' in body
    assert '<aside class="callout callout-warning">' in body


def test_export_unknown_block_kept():
    doc = normalize({"blocks": [{"type": "table", "data": {}}]})
    assert "Unknown block type: table" in build_body(doc)


def test_export_empty_guide():
    guide = SimpleNamespace(title="Empty", content=None)
    html = build_export_html(guide)
    assert "This guide has no content yet." in html
    assert '<div class="toc-container">' not in html


def test_toc_panel_empty_without_headers():
    doc = normalize({"blocks": [{"type": "paragraph", "data": {"text": "x"}}]})
    assert build_toc_panel(doc) == ""


def test_export_description_and_tags(guide):
    html = build_export_html(guide)
    assert '<p class="description">First steps</p>' in html
    assert ">Basics</span>" in html


def test_export_site_name(guide):
    html = build_export_html(guide, site_name="Docs & Co")
    assert "<title>Getting Started - Docs &amp; Co</title>" in html


def test_export_filename_and_headers(guide):
    assert export_filename(guide) == "getting-started.html"
    assert export_filename(SimpleNamespace(slug=None, id="abc")) == "abc.html"
    headers = export_headers(guide)
    assert headers["Content-Type"] == "text/html; charset=utf-8"
    assert headers["Content-Disposition"] == 'attachment; filename="getting-started.html"'


def test_write_export(tmp_path, guide, export_date):
    path = write_export(guide, tmp_path / "out", exported_on=export_date)
    assert path == tmp_path / "out" / "getting-started.html"
    assert path.read_text(encoding="utf-8") == build_export_html(guide, exported_on=export_date)
