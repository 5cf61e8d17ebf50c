"""Translation overlay resolution and cleanup."""

from .overlay import (
    TRANSLATABLE_FIELDS,
    clean,
    clean_slugs,
    has_translation,
    localize,
    resolve,
    resolve_slug,
    translated_locales,
)

__all__ = [
    "TRANSLATABLE_FIELDS",
    "clean",
    "clean_slugs",
    "has_translation",
    "localize",
    "resolve",
    "resolve_slug",
    "translated_locales",
]
