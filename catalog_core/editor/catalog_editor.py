"""
Editor state for one catalog kind screen.

``CatalogEditor`` holds the form and the screen mode
(viewing, creating, editing, saving) and drives the resolver's mutation
contract. Failures never leave the editor in ``SAVING``: the prior mode is
restored and the error message is kept in ``error`` for an inline banner.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..catalog.kind_registry import KindMetadata, get_kind_metadata
from ..constants import DEFAULT_COLOR
from ..enums import CatalogKind, EditorMode
from ..exceptions import (
    BaseError,
    ErrorCode,
    ServiceError,
    not_found,
    permission_denied,
    validation_failed,
)
from ..resolver.catalog_resolver import CatalogResolver
from ..schemas.catalog_schema import BaseItemRead, DomainItemRead
from ..translation import overlay
from ..utils.logger import get_logger
from ..utils.text_utils import clean_text

_FORM_MODES = (EditorMode.CREATING, EditorMode.EDITING)


class CatalogForm(BaseModel):
    """Values being edited; domain-specific columns live in ``extra``."""

    code: str = ""
    name: str = ""
    name_plural: str = ""
    description: str = ""
    icon: str = ""
    color: str = DEFAULT_COLOR
    order: Optional[int] = None
    active: Optional[bool] = None
    is_default: bool = False
    config: Dict[str, Any] = Field(default_factory=dict)
    translations: Dict[str, Dict[str, Optional[str]]] = Field(default_factory=dict)
    slug_translations: Dict[str, str] = Field(default_factory=dict)
    extra: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(validate_assignment=True)

    @classmethod
    def from_item(cls, item: BaseItemRead) -> "CatalogForm":
        form = cls(
            code=item.code,
            name=item.name,
            name_plural=item.name_plural or "",
            description=item.description or "",
            icon=item.icon or "",
            color=item.color or DEFAULT_COLOR,
            order=item.order,
            active=item.active,
            is_default=item.is_default,
            config=dict(getattr(item, "config", None) or {}),
            translations={k: dict(v) for k, v in item.translations.items()},
        )
        if isinstance(item, DomainItemRead):
            form.slug_translations = dict(item.slug_translations)
            form.extra = item.domain_fields
        return form


class LocaleTab(BaseModel):
    """One locale tab of the translation editor."""

    code: str
    label: str
    is_base: bool
    translated: bool


class CatalogEditor:
    """
    Screen controller for one kind.

    Modes: ``VIEWING → CREATING|EDITING → SAVING → VIEWING``. Entering creation
    drops an edit in progress and vice versa; every mutation is refused while
    a save is in flight.
    """

    def __init__(self, resolver: CatalogResolver, kind: Union[str, CatalogKind]):
        self.resolver = resolver
        self.meta: KindMetadata = get_kind_metadata(kind)
        self.kind = self.meta.kind
        self.mode = EditorMode.VIEWING
        self.editing_id: Optional[str] = None
        self.form: Optional[CatalogForm] = None
        self.error: Optional[str] = None
        self.show_inactive = False
        self.logger = get_logger()

    # ==================== LOADING ====================

    def load(self) -> List[BaseItemRead]:
        """Fetch the kind's items (and counts for separate kinds) into the resolver cache."""
        try:
            if self.meta.is_separate:
                self.resolver.fetch_separate(self.kind)
            else:
                self.resolver.fetch_all()
            self.error = None
        except BaseError as e:
            self.error = e.message
        return self.visible_items()

    # ==================== MODES ====================

    def _ensure_idle(self, action: str) -> None:
        if self.mode == EditorMode.SAVING:
            raise ServiceError(
                f"Cannot {action} while a save is in progress",
                error_code=ErrorCode.INVALID_STATE_TRANSITION,
                operation=action,
                kind=self.kind.value,
            )

    def _require_form(self, action: str) -> CatalogForm:
        self._ensure_idle(action)
        if self.mode not in _FORM_MODES or self.form is None:
            raise ServiceError(
                f"Cannot {action} outside of create or edit mode",
                error_code=ErrorCode.INVALID_STATE_TRANSITION,
                operation=action,
                mode=self.mode.value,
            )
        return self.form

    def start_create(self) -> CatalogForm:
        self._ensure_idle("start_create")
        self.mode = EditorMode.CREATING
        self.editing_id = None
        self.form = CatalogForm()
        self.error = None
        return self.form

    def start_edit(self, item_id: str) -> CatalogForm:
        """
        Open a tenant-owned item for editing.

        Raises:
            NotFoundError: Item not in the resolver's cached view
            ForbiddenError: Item is global
        """
        self._ensure_idle("start_edit")
        item = self.resolver.get_by_id(item_id)
        if item is None:
            raise not_found("CatalogItem", item_id=item_id, kind=self.kind.value)
        if item.is_global:
            raise permission_denied("edit", "global catalog item", item_id=item_id)
        self.mode = EditorMode.EDITING
        self.editing_id = item.id
        self.form = CatalogForm.from_item(item)
        self.error = None
        return self.form

    def cancel(self) -> None:
        self._ensure_idle("cancel")
        self.mode = EditorMode.VIEWING
        self.editing_id = None
        self.form = None
        self.error = None

    # ==================== FORM ====================

    def set_field(self, name: str, value: Any) -> None:
        form = self._require_form("set_field")
        if name not in CatalogForm.model_fields or name == "extra":
            form.extra[name] = value
            return
        if value is None and isinstance(CatalogForm.model_fields[name].default, str):
            value = ""
        try:
            setattr(form, name, value)
        except PydanticValidationError as e:
            raise validation_failed(name, value, e.errors()[0]["msg"], cause=e) from e

    def set_config(self, key: str, value: Any) -> None:
        form = self._require_form("set_config")
        form.config[key] = value

    def set_translation(self, locale: str, field: str, value: Optional[str]) -> None:
        """Base locale edits the canonical field; other locales edit the overlay entry."""
        form = self._require_form("set_translation")
        if self.locale_settings().is_base(locale):
            self.set_field(field, value or "")
            return
        form.translations.setdefault(locale, {})[field] = value

    def set_slug_translation(self, locale: str, value: Optional[str]) -> None:
        form = self._require_form("set_slug_translation")
        if self.locale_settings().is_base(locale):
            form.extra["slug"] = value
            return
        form.slug_translations[locale] = value or ""

    def payload(self) -> Dict[str, Any]:
        """Request body for the current form, limited to the fields the kind supports."""
        form = self._require_form("build payload")
        fields = self.meta.fields
        base_locale = self.locale_settings().base_locale

        data: Dict[str, Any] = {"name": form.name, "is_default": form.is_default}
        if self.mode == EditorMode.CREATING and clean_text(form.code):
            data["code"] = form.code
        if fields.name_plural:
            data["name_plural"] = clean_text(form.name_plural)
        if fields.description:
            data["description"] = clean_text(form.description)
        if fields.icon:
            data["icon"] = clean_text(form.icon)
        if fields.color:
            data["color"] = form.color or None
        if fields.config:
            data["config"] = dict(form.config) or None
        if form.order is not None:
            data["order"] = form.order
        if form.active is not None:
            data["active"] = form.active
        if self.meta.supports_translations:
            data["translations"] = overlay.clean(form.translations, base_locale)
        if self.meta.supports_slug_translations:
            data["slug_translations"] = overlay.clean_slugs(form.slug_translations, base_locale)
        if self.meta.is_separate:
            data.update(form.extra)
        return data

    # ==================== ACTIONS ====================

    def save(self) -> Optional[BaseItemRead]:
        """
        Submit the form.

        Returns the saved item, or None when the save failed; the failure
        message is then in ``error`` and the form stays open.
        """
        form = self._require_form("save")
        prior_mode = self.mode
        data = self.payload()
        self.mode = EditorMode.SAVING
        self.error = None

        try:
            if prior_mode == EditorMode.CREATING:
                item = self.resolver.create(self.kind, data)
            else:
                item = self.resolver.update(self.editing_id, data)
        except BaseError as e:
            self.mode = prior_mode
            self.form = form
            self.error = e.message
            return None

        self.logger.info(
            f"Saved {self.kind.value} item {item.code}",
            extra={"kind": self.kind.value, "item_id": item.id, "is_new": prior_mode == EditorMode.CREATING},
        )
        self.mode = EditorMode.VIEWING
        self.editing_id = None
        self.form = None
        return item

    def toggle(self, item_id: str) -> Optional[BaseItemRead]:
        """Flip the item's active flag for this tenant; None on failure."""
        self._ensure_idle("toggle")
        item = self.resolver.get_by_id(item_id)
        try:
            if item is None:
                raise not_found("CatalogItem", item_id=item_id, kind=self.kind.value)
            result = self.resolver.toggle(self.kind, item.code, not item.active)
        except BaseError as e:
            self.error = e.message
            return None
        self.error = None
        return result

    def delete(self, item_id: str) -> bool:
        """Hard-delete a tenant item; confirmation is the caller's job."""
        self._ensure_idle("delete")
        try:
            self.resolver.delete(item_id)
        except BaseError as e:
            self.error = e.message
            return False
        if self.editing_id == item_id:
            self.mode = EditorMode.VIEWING
            self.editing_id = None
            self.form = None
        self.error = None
        return True

    # ==================== VIEW ====================

    def visible_items(self) -> List[BaseItemRead]:
        return self.resolver.items(self.kind, include_inactive=self.show_inactive)

    def global_items(self) -> List[BaseItemRead]:
        return [item for item in self.visible_items() if item.is_global]

    def tenant_items(self) -> List[BaseItemRead]:
        return [item for item in self.visible_items() if not item.is_global]

    def inactive_count(self) -> int:
        return self.resolver.inactive_count(self.kind)

    def can_edit(self, item: BaseItemRead) -> bool:
        return not item.is_global and self.mode != EditorMode.SAVING

    def can_delete(self, item: BaseItemRead) -> bool:
        return not item.is_global and self.mode != EditorMode.SAVING

    def can_toggle(self, item: BaseItemRead) -> bool:
        return self.mode != EditorMode.SAVING

    def locale_settings(self):
        return self.resolver.locale_settings()

    def locale_tabs(self) -> List[LocaleTab]:
        """Enabled locales with a flag telling whether the form already has content for them."""
        if not self.meta.supports_translations:
            return []
        settings = self.locale_settings()
        form = self.form or CatalogForm()
        tabs = []
        for locale in settings.enabled_locales():
            is_base = settings.is_base(locale.code)
            translated = bool(clean_text(form.name)) if is_base else overlay.has_translation(form, locale.code)
            tabs.append(
                LocaleTab(
                    code=locale.code,
                    label=locale.native_label or locale.label,
                    is_base=is_base,
                    translated=translated,
                )
            )
        return tabs
