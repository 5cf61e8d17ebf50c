"""
Locale descriptors and per-tenant locale settings.

The locale set is data, not an enum: each tenant stores an ordered list of
descriptors with one base locale (edited through the canonical item fields)
and an optional fallback locale for translation lookups.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..config import get_config
from ..exceptions import ErrorCode, ValidationError


class LocaleDescriptor(BaseModel):
    code: str = Field(min_length=2, max_length=10)
    label: str
    native_label: Optional[str] = None
    flag_emoji: Optional[str] = None
    active: bool = True

    model_config = ConfigDict(from_attributes=True, extra="ignore")


DEFAULT_LOCALES: List[LocaleDescriptor] = [
    LocaleDescriptor(code="es", label="Spanish", native_label="Español", flag_emoji="🇪🇸"),
    LocaleDescriptor(code="en", label="English", native_label="English", flag_emoji="🇺🇸"),
    LocaleDescriptor(code="fr", label="French", native_label="Français", flag_emoji="🇫🇷"),
    LocaleDescriptor(code="pt", label="Portuguese", native_label="Português", flag_emoji="🇧🇷"),
]


class LocaleSettings(BaseModel):
    """Ordered locale list of a tenant plus its base and fallback locales."""

    locales: List[LocaleDescriptor] = Field(default_factory=lambda: list(DEFAULT_LOCALES))
    base_locale: str = Field(default_factory=lambda: get_config().locales.base_locale)
    fallback_locale: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def check_locales(self) -> "LocaleSettings":
        codes = [locale.code for locale in self.locales]
        if len(set(codes)) != len(codes):
            raise ValidationError(
                "Locale codes must be unique",
                field="locales",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                value=codes,
            )
        if codes and self.base_locale not in codes:
            raise ValidationError(
                f"Base locale '{self.base_locale}' is not in the tenant locale list",
                field="base_locale",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                value=self.base_locale,
            )
        # A fallback equal to the base locale is the canonical field anyway
        if self.fallback_locale == self.base_locale:
            self.fallback_locale = None
        return self

    @classmethod
    def default(cls) -> "LocaleSettings":
        return cls()

    def enabled_locales(self) -> List[LocaleDescriptor]:
        """Active locales in configured order."""
        return [locale for locale in self.locales if locale.active]

    def enabled_codes(self) -> List[str]:
        return [locale.code for locale in self.enabled_locales()]

    def overlay_locales(self) -> List[LocaleDescriptor]:
        """Active locales that are edited as translation overlays (all but the base)."""
        return [locale for locale in self.enabled_locales() if locale.code != self.base_locale]

    def is_base(self, locale: Optional[str]) -> bool:
        return locale is None or locale == self.base_locale
