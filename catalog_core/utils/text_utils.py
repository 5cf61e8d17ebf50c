"""Text helpers for catalog codes and slugs."""

import re
import unicodedata
from typing import Any, Optional

_WHITESPACE = re.compile(r"\s+")
_CODE_INVALID = re.compile(r"[^a-z0-9_]")
_SLUG_INVALID = re.compile(r"[^a-z0-9-]")
_DASH_RUN = re.compile(r"-{2,}")


def strip_accents(text: str) -> str:
    """Drop combining marks so "Área" becomes "Area"."""
    normalized = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in normalized if not unicodedata.combining(ch))


def derive_code(name: Optional[str]) -> str:
    """
    Derive a machine code from a display name.

    Lower-cases, turns whitespace runs into underscores and drops everything
    outside ``[a-z0-9_]``. Accented letters keep their base letter.

    >>> derive_code("Área Social")
    'area_social'
    """
    if not name:
        return ""
    code = strip_accents(name.strip()).lower()
    code = _WHITESPACE.sub("_", code)
    return _CODE_INVALID.sub("", code)


def slugify(text: Optional[str]) -> str:
    """URL slug: lower-case words joined with dashes."""
    if not text:
        return ""
    slug = strip_accents(text.strip()).lower()
    slug = _WHITESPACE.sub("-", slug)
    slug = _SLUG_INVALID.sub("", slug)
    return _DASH_RUN.sub("-", slug).strip("-")


def is_blank(value: Any) -> bool:
    """True for None, empty strings and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def clean_text(value: Any) -> Optional[str]:
    """Trim a string value; blank values become None."""
    if is_blank(value):
        return None
    return str(value).strip()
