"""
Per-locale translation overlays for catalog items.

Canonical item fields hold the base-locale text; ``translations`` holds sparse
overrides for the other locales (``{"en": {"name": "Pool"}}``) and never the
base locale itself. ``slug_translations`` maps locale to a public URL slug.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..config import get_config
from ..schemas.locale_schema import LocaleSettings
from ..utils.text_utils import clean_text, slugify

TRANSLATABLE_FIELDS = ("name", "name_plural", "description")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _translations(item: Any) -> Mapping[str, Any]:
    return _field(item, "translations") or {}


def _entry_value(translations: Mapping[str, Any], locale: Optional[str], field: str) -> Optional[str]:
    if not locale:
        return None
    entry = translations.get(locale)
    if not isinstance(entry, Mapping):
        return None
    return clean_text(entry.get(field))


def _base_locale(settings: Optional[LocaleSettings], base_locale: Optional[str] = None) -> str:
    if base_locale:
        return base_locale
    if settings is not None:
        return settings.base_locale
    return get_config().locales.base_locale


def resolve(item: Any, field: str, locale: Optional[str], settings: Optional[LocaleSettings] = None) -> str:
    """
    Display text of ``field`` for ``locale``.

    Precedence: the locale's overlay entry, then the tenant fallback locale,
    then the canonical field. Blank overlay values never shadow the canonical
    text.
    """
    canonical = _field(item, field)
    canonical = "" if canonical is None else str(canonical)

    if locale is None or locale == _base_locale(settings):
        return canonical

    translations = _translations(item)
    value = _entry_value(translations, locale, field)
    if value:
        return value

    fallback = settings.fallback_locale if settings is not None else None
    if fallback and fallback != locale:
        value = _entry_value(translations, fallback, field)
        if value:
            return value

    return canonical


def localize(
    item: Any,
    locale: Optional[str],
    settings: Optional[LocaleSettings] = None,
    fields=TRANSLATABLE_FIELDS,
) -> Dict[str, str]:
    """Resolve every translatable field of an item at once."""
    return {field: resolve(item, field, locale, settings) for field in fields}


def clean(
    translations: Optional[Mapping[str, Any]], base_locale: Optional[str] = None
) -> Dict[str, Dict[str, str]]:
    """
    Normalize translation input before persistence.

    Trims values, drops blank fields, drops locale entries left empty and
    drops the base-locale key. ``clean(clean(x)) == clean(x)``.
    """
    base = _base_locale(None, base_locale)
    cleaned: Dict[str, Dict[str, str]] = {}
    for locale, entry in (translations or {}).items():
        locale = (locale or "").strip()
        if not locale or locale == base or not isinstance(entry, Mapping):
            continue
        kept = {}
        for field, value in entry.items():
            text = clean_text(value)
            if text:
                kept[field] = text
        if kept:
            cleaned[locale] = kept
    return cleaned


def clean_slugs(
    slug_translations: Optional[Mapping[str, Any]], base_locale: Optional[str] = None
) -> Dict[str, str]:
    """Trim slug overrides and drop blank ones and the base-locale key."""
    base = _base_locale(None, base_locale)
    cleaned: Dict[str, str] = {}
    for locale, slug in (slug_translations or {}).items():
        locale = (locale or "").strip()
        text = clean_text(slug)
        if locale and locale != base and text:
            cleaned[locale] = text
    return cleaned


def has_translation(item: Any, locale: str) -> bool:
    """True iff the item has at least one non-blank overlay value for ``locale``."""
    entry = _translations(item).get(locale)
    if not isinstance(entry, Mapping):
        return False
    return any(clean_text(value) for value in entry.values())


def translated_locales(item: Any, settings: LocaleSettings) -> List[str]:
    """Overlay locales (in tenant order) that carry a translation for the item."""
    return [locale.code for locale in settings.overlay_locales() if has_translation(item, locale.code)]


def resolve_slug(item: Any, locale: Optional[str], settings: Optional[LocaleSettings] = None) -> str:
    """
    Public slug of an item for ``locale``.

    Uses the slug override for the locale, then the item's own slug, then a
    slug derived from the resolved name.
    """
    if locale and locale != _base_locale(settings):
        override = clean_text((_field(item, "slug_translations") or {}).get(locale))
        if override:
            return override
        own_slug = clean_text(_field(item, "slug"))
        name = resolve(item, "name", locale, settings)
        # A translated name gets its own slug; otherwise share the base slug
        if own_slug and name == (_field(item, "name") or ""):
            return own_slug
        return slugify(name)

    own_slug = clean_text(_field(item, "slug"))
    return own_slug or slugify(_field(item, "name"))
