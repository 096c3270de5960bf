"""
Slug normalization.

Slugs are URL-safe labels derived from a title or an explicit value.
Every stored slug is an output of slugify(), and slugify() is idempotent.
"""

import re
from typing import Any

_QUOTES = re.compile(r"['\"]")
# Latin letters, digits, Cyrillic, underscore, hyphen and whitespace survive
_DISALLOWED = re.compile(r"[^a-z0-9а-яё_\-\s]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")
_EDGE_SEPARATORS = re.compile(r"^[-_]+|[-_]+$")


def slugify(value: Any) -> str:
    """
    Normalize an arbitrary value into a slug.
    
    The result is lowercase, has no whitespace, and neither starts nor
    ends with a separator. It may be empty (e.g. for punctuation-only
    input); callers decide on a fallback.
    """
    text = "" if value is None else str(value)
    text = text.strip().lower()
    text = _QUOTES.sub("", text)
    text = _DISALLOWED.sub("", text)
    text = _WHITESPACE.sub("-", text)
    text = _DASHES.sub("-", text)
    return _EDGE_SEPARATORS.sub("", text)
