"""Static HTML export: a self-contained, downloadable page for one guide"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from guidebook.core.models import (
    CalloutBlock, CodeBlock, Document, HeaderBlock, ImageBlock, ListBlock, ParagraphBlock,
)
from guidebook.core.normalize import normalize
from guidebook.core.render.common import (
    CODE_CLASS, CODE_LABEL, EMPTY_CONTENT,
    callout_style, esc, format_date, image_source, tag_badge,
)
from guidebook.core.sanitize import sanitize_inline
from guidebook.core.toc import anchor_id, derive_toc, toc_indent, toc_stats


logger = logging.getLogger(__name__)

PRISM_CDN = "https://cdnjs.cloudflare.com/ajax/libs/prism/1.29.0"

COPY_ICON = (
    '<svg width="16" height="16" viewBox="0 0 24 24" fill="none" xmlns="http://www.w3.org/2000/svg">'
    '<path d="M16 1H4C2.9 1 2 1.9 2 3V17H4V3H16V1ZM19 5H8C6.9 5 6 5.9 6 7V21C6 22.1 6.9 23 8 23H19'
    'C20.1 23 21 22.1 21 21V7C21 5.9 20.1 5 19 5ZM19 21H8V7H19V21Z" fill="currentColor"/></svg>'
)

STYLES = """
* { box-sizing: border-box; }
html { scroll-behavior: smooth; }
body { background-color: hsl(220 13% 5%); color: hsl(213 31% 81%);
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
  line-height: 1.7; margin: 0; padding: 0; }
.container { display: flex; max-width: 1400px; margin: 0 auto; }
.toc-container { width: 300px; background-color: hsl(217 19% 11%); border-right: 1px solid hsl(217 19% 19%);
  padding: 2rem; height: 100vh; overflow-y: auto; position: sticky; top: 0; }
.toc-container h2 { font-size: 1.125rem; font-weight: 600; margin-bottom: 1rem; }
.toc-nav { display: flex; flex-direction: column; gap: 0.25rem; }
.toc-link { display: block; padding: 0.5rem 0.75rem; font-size: 0.875rem; color: hsl(213 20% 63%);
  text-decoration: none; border-radius: 0.375rem; }
.toc-link:hover { color: hsl(213 31% 81%); background-color: hsl(217 19% 19%); }
.toc-stats { margin-top: 2rem; padding-top: 1.5rem; border-top: 1px solid hsl(217 19% 19%); }
.stat { display: flex; justify-content: space-between; font-size: 0.75rem; color: hsl(213 20% 63%); }
.main-content { flex: 1; padding: 2rem; min-width: 0; }
h1, h2, h3, h4, h5, h6 { color: hsl(217 91% 68%); margin-top: 2rem; margin-bottom: 1rem; font-weight: 700; line-height: 1.2; }
h1 { font-size: 2.25rem; } h2 { font-size: 1.875rem; } h3 { font-size: 1.5rem; }
h4 { font-size: 1.25rem; } h5 { font-size: 1.125rem; } h6 { font-size: 1rem; }
.description { color: hsl(213 20% 63%); font-size: 1.125rem; margin-bottom: 1rem; }
.tags { margin-bottom: 2rem; display: flex; gap: 0.5rem; flex-wrap: wrap; }
.tag { padding: 0.25rem 0.5rem; border-radius: 9999px; font-size: 0.75rem; }
.code-block { margin: 1.5rem 0; border-radius: 0.5rem; overflow: hidden;
  background-color: hsl(217 19% 11%); border: 1px solid hsl(217 19% 19%); }
.code-header { display: flex; justify-content: space-between; align-items: center;
  padding: 0.5rem 1rem; background-color: hsl(217 19% 19%); }
.code-language { font-size: 0.75rem; color: hsl(213 20% 63%); font-weight: 500; }
.copy-btn { display: flex; align-items: center; gap: 0.25rem; padding: 0.25rem 0.5rem; background: transparent;
  color: hsl(213 31% 81%); border: none; border-radius: 0.25rem; cursor: pointer; font-size: 0.75rem; }
.copy-btn:hover { background-color: hsl(217 19% 11%); }
.copy-btn svg { width: 12px; height: 12px; }
.copy-success { color: hsl(142 71% 45%) !important; }
pre { margin: 0; padding: 1rem; background-color: hsl(217 19% 11%) !important; overflow-x: auto; }
code { font-family: 'Monaco', 'Menlo', 'Ubuntu Mono', monospace; font-size: 0.875rem; }
figure { margin: 2rem 0; }
img { max-width: 100%; height: auto; border-radius: 0.5rem; border: 1px solid hsl(217 19% 19%); }
figcaption { text-align: center; color: hsl(213 20% 63%); font-size: 0.875rem; margin-top: 0.5rem; font-style: italic; }
ol, ul { margin: 1rem 0; padding-left: 1.5rem; }
li { margin: 0.25rem 0; }
p { margin: 1rem 0; }
.callout { display: flex; gap: 0.75rem; border-left: 4px solid; border-radius: 0.5rem; padding: 1rem; margin: 1.5rem 0; }
.callout-note { background-color: hsl(217 60% 15%); border-color: hsl(217 91% 60%); }
.callout-info { background-color: hsl(190 60% 13%); border-color: hsl(190 80% 50%); }
.callout-warning { background-color: hsl(45 60% 13%); border-color: hsl(45 93% 50%); }
.callout-icon { flex-shrink: 0; }
.unknown-block, .empty-content { padding: 1rem; border: 1px solid hsl(217 19% 19%); border-radius: 0.5rem;
  color: hsl(213 20% 63%); font-size: 0.875rem; }
.footer { margin-top: 4rem; padding-top: 2rem; border-top: 1px solid hsl(217 19% 19%);
  color: hsl(213 20% 63%); font-size: 0.875rem; }
@media (max-width: 1024px) {
  .container { flex-direction: column; }
  .toc-container { width: 100%; height: auto; position: relative; border-right: none;
    border-bottom: 1px solid hsl(217 19% 19%); }
}
"""

SCRIPT = """
function copyCode(codeId, button) {
  var codeElement = document.getElementById(codeId);
  if (!codeElement || !navigator.clipboard) return;
  navigator.clipboard.writeText(codeElement.textContent).then(function () {
    var original = button.innerHTML;
    button.textContent = 'Copied!';
    button.classList.add('copy-success');
    setTimeout(function () {
      button.innerHTML = original;
      button.classList.remove('copy-success');
    }, 2000);
  }).catch(function (err) { console.error('Failed to copy code:', err); });
}
document.addEventListener('DOMContentLoaded', function () {
  if (typeof Prism !== 'undefined') { Prism.highlightAll(); }
});
"""


def _block_html(block: Any, index: int) -> str:
    """Raw-tag rendering of one block; tag mapping and anchors match the page view."""
    if isinstance(block, HeaderBlock):
        level = block.data.level
        return f'<h{level} id="{anchor_id(index)}">{esc(block.data.text)}</h{level}>'
    if isinstance(block, ParagraphBlock):
        return f"<p>{sanitize_inline(block.data.text)}</p>"
    if isinstance(block, CodeBlock):
        code_id = f"code-{index}"
        language = block.data.language
        return (
            f'<div class="code-block"><div class="code-header">'
            f'<span class="code-language">{esc(language or CODE_LABEL)}</span>'
            f'<button class="copy-btn" onclick="copyCode(\'{code_id}\', this)" title="Copy code">'
            f'{COPY_ICON} Copy</button></div>'
            f'<pre><code id="{code_id}" class="language-{esc(language or CODE_CLASS)}">{esc(block.data.code)}</code></pre>'
            f'</div>'
        )
    if isinstance(block, ListBlock):
        tag = "ol" if block.data.style == "ordered" else "ul"
        return f"<{tag}>" + "".join(f"<li>{esc(i)}</li>" for i in block.data.items) + f"</{tag}>"
    if isinstance(block, ImageBlock):
        src = image_source(block.data)
        caption = block.data.caption
        if not src:
            return '<figure><p class="unknown-block">Image unavailable</p></figure>'
        figcaption = f"<figcaption>{esc(caption)}</figcaption>" if caption else ""
        return f'<figure><img src="{esc(src)}" alt="{esc(caption)}" />{figcaption}</figure>'
    if isinstance(block, CalloutBlock):
        style = callout_style(block.data.type)
        return (
            f'<aside class="callout callout-{block.data.type}">'
            f'<span class="callout-icon" title="{style["label"]}">{style["icon"]}</span>'
            f'<div>{sanitize_inline(block.data.text)}</div></aside>'
        )
    block_type = getattr(block, "type", None) or "unknown"
    return f'<div class="unknown-block">Unknown block type: {esc(block_type)}</div>'


def build_toc_panel(document: Document) -> str:
    """TOC sidebar with section/block stats; empty string when there are no headers."""
    entries = derive_toc(document)
    if not entries:
        return ""
    links = "".join(
        f'<a href="#{e.anchor_id}" class="toc-link" style="padding-left: {toc_indent(e)}rem;">{esc(e.text)}</a>'
        for e in entries
    )
    counts = toc_stats(document)
    return (
        f'<div class="toc-container"><h2>Table of Contents</h2>'
        f'<nav class="toc-nav">{links}</nav>'
        f'<div class="toc-stats">'
        f'<div class="stat"><span>Total sections:</span><span>{counts["sections"]}</span></div>'
        f'<div class="stat"><span>Total blocks:</span><span>{counts["blocks"]}</span></div>'
        f'</div></div>'
    )


def build_body(document: Document) -> str:
    """Concatenated block HTML in document order, or the no-content placeholder."""
    if not document.blocks:
        return f'<div class="empty-content">{EMPTY_CONTENT}</div>'
    return "\n".join(_block_html(b, i) for i, b in enumerate(document.blocks))


def build_export_html(
    guide: Any,
    document: Optional[Document] = None,
    exported_on: Optional[date] = None,
    site_name: str = "Guidebook",
    ) -> str:
    """Return a complete standalone HTML page for a guide.

    The guide's stored content is normalized when `document` is not given, so
    anchors match the TOC and page view. Syntax highlighting loads from a CDN
    as progressive enhancement; the page reads correctly without it.
    """
    if document is None:
        document = normalize(getattr(guide, "content", None))
    title = esc(getattr(guide, "title", ""))
    description = getattr(guide, "description", None)
    tags = "".join(tag_badge(t) for t in (getattr(guide, "tags", None) or []))
    exported = format_date(exported_on or date.today())
    description_html = f'<p class="description">{esc(description)}</p>' if description else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title} - {esc(site_name)}</title>
<link href="{PRISM_CDN}/themes/prism-tomorrow.min.css" rel="stylesheet">
<script src="{PRISM_CDN}/components/prism-core.min.js"></script>
<script src="{PRISM_CDN}/plugins/autoloader/prism-autoloader.min.js"></script>
<style>{STYLES}</style>
</head>
<body>
<div class="container">
{build_toc_panel(document)}
<div class="main-content">
<header>
<h1>{title}</h1>
{description_html}
<div class="tags">{tags}</div>
</header>
<main>
{build_body(document)}
</main>
<div class="footer"><p>Exported from {esc(site_name)} on {exported}</p></div>
</div>
</div>
<script>{SCRIPT}</script>
</body>
</html>
"""


def export_filename(guide: Any) -> str:
    """Download name: `{slug}.html`, falling back to the guide id."""
    return f"{getattr(guide, 'slug', None) or getattr(guide, 'id', None) or 'guide'}.html"


def export_headers(guide: Any) -> dict[str, str]:
    """HTTP headers for serving the export as a file download."""
    return {
        "Content-Type": "text/html; charset=utf-8",
        "Content-Disposition": f'attachment; filename="{export_filename(guide)}"',
    }


def write_export(
    guide: Any,
    output_dir: Path,
    exported_on: Optional[date] = None,
    site_name: str = "Guidebook",
    ) -> Path:
    """Write the export for one guide into output_dir and return its path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(guide)
    path.write_text(build_export_html(guide, exported_on=exported_on, site_name=site_name), encoding="utf-8")
    logger.info("Exported guide %s to %s", getattr(guide, "id", None), path)
    return path
