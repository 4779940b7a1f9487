"""Table-of-contents derivation from a normalized block sequence"""

from typing import Sequence, Union

from guidebook.core.models import Block, Document, HeaderBlock, TocEntry


INDENT_REM = 0.75


def anchor_id(index: int) -> str:
    """Anchor shared by the TOC, the page view, and the export for block `index`."""
    return f"section-{index}"


def _blocks(source: Union[Document, Sequence[Block]]) -> Sequence[Block]:
    return source.blocks if isinstance(source, Document) else source


def derive_toc(source: Union[Document, Sequence[Block]]) -> list[TocEntry]:
    """Return one entry per header block, in document order.

    `source_index` is the header's position in the normalized sequence, so the
    anchors line up with the ones the renderers assign. Entries stay flat; the
    level only drives indentation.
    """
    return [
        TocEntry(
            anchor_id=anchor_id(index),
            text=block.data.text,
            level=block.data.level,
            source_index=index,
        )
        for index, block in enumerate(_blocks(source))
        if isinstance(block, HeaderBlock)
    ]


def filter_toc(entries: list[TocEntry], query: str) -> list[TocEntry]:
    """Case-insensitive substring filter over header text; a blank query keeps all."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(entries)
    return [e for e in entries if needle in e.text.lower()]


def toc_indent(entry: TocEntry) -> float:
    """Left indentation in rem: (level - 1) units."""
    return (entry.level - 1) * INDENT_REM


def toc_stats(source: Union[Document, Sequence[Block]]) -> dict[str, int]:
    """Section (header) and block counts shown under the TOC."""
    blocks = _blocks(source)
    return {
        "sections": sum(1 for b in blocks if isinstance(b, HeaderBlock)),
        "blocks": len(blocks),
    }
