"""Allow-list sanitizer for the inline markup carried by paragraph and callout text"""

import re

import bleach


ALLOWED_TAGS = frozenset({"b", "strong", "i", "em", "u", "br"})

# bleach keeps the text of stripped elements; script and style bodies must go entirely
DROP_CONTENT_RE = re.compile(r"<(script|style)\b[^>]*>.*?(</\1\s*>|$)", re.IGNORECASE | re.DOTALL)

_cleaner = bleach.Cleaner(tags=ALLOWED_TAGS, attributes={}, strip=True, strip_comments=True)


def sanitize_inline(text: str) -> str:
    """Reduce text to the inline allow-list (b, strong, i, em, u, br). Idempotent.

    Attributes are removed, other tags are stripped with their text kept, and
    the result is well-formed (unclosed tags closed, stray end tags dropped).
    """
    if not text:
        return ""
    return _cleaner.clean(DROP_CONTENT_RE.sub("", text))
