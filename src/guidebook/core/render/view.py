"""Interactive page rendering: one displayable HTML unit per block"""

from typing import Any, Callable, Optional, Sequence

from pydantic import BaseModel

from guidebook.core.models import (
    Block, CalloutBlock, CodeBlock, Document, HeaderBlock, ImageBlock,
    ListBlock, ParagraphBlock,
)
from guidebook.core.normalize import normalize
from guidebook.core.render.common import (
    CODE_CLASS, CODE_LABEL, EMPTY_CONTENT,
    callout_style, esc, format_date, image_source, tag_badge,
)
from guidebook.core.sanitize import sanitize_inline
from guidebook.core.toc import anchor_id, derive_toc, toc_indent, toc_stats


class BlockView(BaseModel):
    """Rendered unit for a single block; anchor_id is set for headers only."""
    index: int
    type: str
    anchor_id: Optional[str] = None
    html: str


def _header(block: HeaderBlock, index: int) -> str:
    level = block.data.level
    return (
        f'<h{level} id="{anchor_id(index)}" class="guide-header level-{level}" '
        f'data-testid="header-{index}">{esc(block.data.text)}</h{level}>'
    )


def _paragraph(block: ParagraphBlock, index: int) -> str:
    return f'<p class="guide-paragraph" data-testid="paragraph-{index}">{sanitize_inline(block.data.text)}</p>'


def _code(block: CodeBlock, index: int) -> str:
    code_id = f"code-{index}"
    language = block.data.language
    return (
        f'<div class="code-block" data-testid="code-{index}">'
        f'<div class="code-header">'
        f'<span class="code-language">{esc(language or CODE_LABEL)}</span>'
        f'<button type="button" class="copy-button" data-copy-target="{code_id}" '
        f'data-testid="button-copy-{index}">Copy</button>'
        f'</div>'
        f'<pre><code id="{code_id}" class="language-{esc(language or CODE_CLASS)}">{esc(block.data.code)}</code></pre>'
        f'</div>'
    )


def _list(block: ListBlock, index: int) -> str:
    tag = "ol" if block.data.style == "ordered" else "ul"
    items = "".join(f"<li>{esc(item)}</li>" for item in block.data.items)
    return f'<{tag} class="guide-list" data-testid="list-{index}">{items}</{tag}>'


def _image(block: ImageBlock, index: int) -> str:
    src = image_source(block.data)
    caption = block.data.caption
    if not src:
        return f'<figure class="guide-image missing" data-testid="image-{index}"><p>Image unavailable</p></figure>'
    figcaption = f"<figcaption>{esc(caption)}</figcaption>" if caption else ""
    return (
        f'<figure class="guide-image" data-testid="image-{index}">'
        f'<img src="{esc(src)}" alt="{esc(caption)}" loading="lazy">{figcaption}</figure>'
    )


def _callout(block: CalloutBlock, index: int) -> str:
    style = callout_style(block.data.type)
    return (
        f'<div class="callout callout-{block.data.type}" role="note" data-testid="callout-{index}">'
        f'<span class="callout-icon" title="{style["label"]}" aria-hidden="true">{style["icon"]}</span>'
        f'<div class="callout-body">{sanitize_inline(block.data.text)}</div>'
        f'</div>'
    )


def _unknown(block: Any, index: int) -> str:
    block_type = getattr(block, "type", None) or "unknown"
    return (
        f'<div class="unknown-block" data-testid="unknown-{index}">'
        f'<p>Unknown block type: {esc(block_type)}</p></div>'
    )


RENDERERS: dict[type, Callable[[Any, int], str]] = {
    HeaderBlock:    _header,
    ParagraphBlock: _paragraph,
    CodeBlock:      _code,
    ListBlock:      _list,
    ImageBlock:     _image,
    CalloutBlock:   _callout,
}


def render_block(block: Block, index: int) -> str:
    """HTML for one block at `index`; unrecognized blocks render a placeholder."""
    return RENDERERS.get(type(block), _unknown)(block, index)


def render_blocks(blocks: Sequence[Block]) -> list[BlockView]:
    return [
        BlockView(
            index=index,
            type=getattr(block, "type", None) or "unknown",
            anchor_id=anchor_id(index) if isinstance(block, HeaderBlock) else None,
            html=render_block(block, index),
        )
        for index, block in enumerate(blocks)
    ]


def render_toc(document: Document) -> str:
    """Sidebar navigation listing header anchors, indented by level."""
    entries = derive_toc(document)
    if entries:
        links = "".join(
            f'<a href="#{e.anchor_id}" class="toc-link" style="padding-left: {toc_indent(e)}rem;" '
            f'data-testid="toc-link-{e.source_index}">{esc(e.text)}</a>'
            for e in entries
        )
    else:
        links = '<div class="toc-empty">No sections available</div>'
    stats = ""
    if document.blocks:
        counts = toc_stats(document)
        stats = (
            f'<div class="toc-stats">'
            f'<div class="stat"><span>Total sections:</span><span>{counts["sections"]}</span></div>'
            f'<div class="stat"><span>Total blocks:</span><span>{counts["blocks"]}</span></div>'
            f'</div>'
        )
    return (
        f'<aside class="toc"><h2 data-testid="toc-title">Table of Contents</h2>'
        f'<nav class="toc-nav">{links}</nav>{stats}</aside>'
    )


def render_page(guide: Any, document: Optional[Document] = None) -> str:
    """Full guide view: TOC sidebar, guide header, and rendered content.

    When `document` is omitted the guide's stored content is normalized first,
    so anchors are always computed over the normalized sequence.
    """
    if document is None:
        document = normalize(getattr(guide, "content", None))

    tags = "".join(tag_badge(t) for t in (getattr(guide, "tags", None) or []))
    description = getattr(guide, "description", None)
    created = format_date(getattr(guide, "created_at", None))

    if document.blocks:
        body = "".join(v.html for v in render_blocks(document.blocks))
    else:
        body = f'<div class="empty-content"><p>{EMPTY_CONTENT}</p></div>'

    return (
        f'<div class="guide-page">{render_toc(document)}'
        f'<main class="guide-main">'
        f'<header class="guide-heading">'
        f'<h1 data-testid="guide-title">{esc(getattr(guide, "title", ""))}</h1>'
        f'<div class="tags">{tags}</div>'
        + (f'<span class="guide-created">Created {created}</span>' if created else "")
        + '</header>'
        + (f'<p class="guide-description" data-testid="guide-description">{esc(description)}</p>' if description else "")
        + f'<div class="guide-content">{body}</div>'
        f'</main></div>'
    )
