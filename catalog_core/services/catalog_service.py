"""
Catalog service: the server-side mutation contract.

Every operation is scoped to one tenant. The service validates input
(required name, code derivation, code collisions over the tenant's visible
set), applies kind policies (approval gating, single default) and dispatches
to the store backing the kind.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..catalog.kind_registry import (
    KindMetadata,
    get_kind_metadata,
    separate_kinds,
    unified_kinds,
)
from ..context.operation_context import operation
from ..enums import CatalogKind
from ..exceptions import (
    ErrorCode,
    ValidationError,
    duplicate,
    not_found,
    permission_denied,
    validation_failed,
)
from ..schemas.catalog_schema import BaseItemRead, CatalogItemRead
from ..schemas.locale_schema import LocaleSettings
from ..stores import BaseKindStore, get_store
from ..stores.unified_store import UnifiedKindStore
from ..translation import overlay
from ..utils.text_utils import clean_text, derive_code
from .base_service import SessionManagedService
from .tenant_service import TenantService

KindLike = Union[str, CatalogKind]

_TEXT_FIELDS = ("name", "name_plural", "description", "icon", "color")


class CatalogService(SessionManagedService):
    """
    Tenant-scoped CRUD, activation and counts over every catalog kind.
    """

    def __init__(self, session: Optional[Session] = None):
        super().__init__(session=session)
        self.tenants = TenantService(session=self.session)

    def store_for(self, kind: KindLike) -> BaseKindStore:
        return get_store(kind, self.session)

    # ==================== READS ====================

    @operation()
    def list_catalogs(
        self, tenant_id: str, include_inactive: bool = False
    ) -> Dict[CatalogKind, List[CatalogItemRead]]:
        """Merged view of every unified kind for the tenant."""
        self.tenants.require_tenant(tenant_id)
        store = UnifiedKindStore(self.session)
        return {
            kind: store.list(tenant_id, kind, include_inactive=include_inactive)
            for kind in unified_kinds()
        }

    @operation()
    def list_items(
        self, tenant_id: str, kind: KindLike, include_inactive: bool = False
    ) -> List[BaseItemRead]:
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        return self.store_for(meta.kind).list(tenant_id, meta.kind, include_inactive=include_inactive)

    @operation()
    def get_item(self, tenant_id: str, kind: KindLike, item_id: str) -> BaseItemRead:
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        item = self.store_for(meta.kind).get(tenant_id, meta.kind, item_id)
        if item is None:
            raise not_found("CatalogItem", item_id=item_id, kind=meta.kind.value, tenant_id=tenant_id)
        return item

    def unified_kind_of(self, tenant_id: str, item_id: str) -> CatalogKind:
        """Kind of a unified item addressed by id only; NotFoundError if not visible."""
        kind = UnifiedKindStore(self.session).kind_of(tenant_id, item_id)
        if kind is None:
            raise not_found("CatalogItem", item_id=item_id, tenant_id=tenant_id)
        return kind

    @operation()
    def count_items(self, tenant_id: str, kind: KindLike, active: Optional[bool] = None) -> int:
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        return self.store_for(meta.kind).count(tenant_id, meta.kind, active=active)

    @operation()
    def separate_counts(self, tenant_id: str) -> Dict[CatalogKind, int]:
        """Visible item counts of the separate kinds shown with a count badge."""
        self.tenants.require_tenant(tenant_id)
        return {
            kind: self.store_for(kind).count(tenant_id, kind)
            for kind in separate_kinds(counted_only=True)
        }

    @operation()
    def locale_settings(self, tenant_id: str) -> LocaleSettings:
        return self.tenants.get_locale_settings(tenant_id)

    # ==================== MUTATIONS ====================

    @operation()
    def create_item(self, tenant_id: str, kind: KindLike, fields: Dict[str, Any]) -> BaseItemRead:
        """
        Create a tenant-owned item.

        Raises:
            ValidationError: Blank name, underivable code or code collision
            NotFoundError: Unknown tenant
        """
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        store = self.store_for(meta.kind)
        settings = self.tenants.get_locale_settings(tenant_id)

        data = self._prepare(meta, fields, settings.base_locale)

        if not data.get("name"):
            raise ValidationError(
                "Name is required",
                field="name",
                error_code=ErrorCode.MISSING_REQUIRED,
                kind=meta.kind.value,
            )

        data["code"] = data.get("code") or derive_code(data["name"])
        if not data["code"]:
            raise validation_failed("code", data["name"], "no code can be derived from the name")

        if store.find_by_code(tenant_id, meta.kind, data["code"]) is not None:
            raise duplicate("CatalogItem", kind=meta.kind.value, code=data["code"])

        if data.get("active") is None:
            # Approval-gated kinds start pending until a tenant admin activates them
            data["active"] = not meta.approval_gated
        if data.get("order") is None:
            data["order"] = store.next_order(tenant_id, meta.kind)
        data["is_default"] = bool(data.get("is_default"))

        with self.transaction():
            item = store.create(tenant_id, meta.kind, data)
            if item.is_default:
                store.clear_defaults(tenant_id, meta.kind, keep_id=item.id)

        return item

    @operation()
    def update_item(
        self, tenant_id: str, kind: KindLike, item_id: str, fields: Dict[str, Any]
    ) -> BaseItemRead:
        """
        Update the content of a tenant-owned item.

        Raises:
            NotFoundError: Item not in the tenant's visible set
            ForbiddenError: Item is global (only ``toggle_item`` applies to globals)
            ValidationError: Blank name or code collision
        """
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        store = self.store_for(meta.kind)

        existing = store.get(tenant_id, meta.kind, item_id)
        if existing is None:
            raise not_found("CatalogItem", item_id=item_id, kind=meta.kind.value, tenant_id=tenant_id)
        if existing.is_global:
            raise permission_denied(
                "update", "global catalog item", item_id=item_id, kind=meta.kind.value
            )

        settings = self.tenants.get_locale_settings(tenant_id)
        data = self._prepare(meta, fields, settings.base_locale)

        if "name" in data and not data["name"]:
            raise ValidationError(
                "Name is required",
                field="name",
                error_code=ErrorCode.MISSING_REQUIRED,
                kind=meta.kind.value,
            )

        if "code" in data:
            data["code"] = data["code"] or derive_code(data.get("name") or existing.name)
            if data["code"] != existing.code and (
                store.find_by_code(tenant_id, meta.kind, data["code"], exclude_id=item_id)
                is not None
            ):
                raise duplicate("CatalogItem", kind=meta.kind.value, code=data["code"])

        with self.transaction():
            item = store.update(tenant_id, meta.kind, item_id, data)
            if data.get("is_default"):
                store.clear_defaults(tenant_id, meta.kind, keep_id=item_id)

        return item

    @operation()
    def delete_item(self, tenant_id: str, kind: KindLike, item_id: str) -> None:
        """
        Hard-delete a tenant-owned item.

        Raises:
            NotFoundError: Item not in the tenant's visible set
            ForbiddenError: Item is global
        """
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        with self.transaction():
            self.store_for(meta.kind).delete(tenant_id, meta.kind, item_id)

    @operation()
    def toggle_item(self, tenant_id: str, kind: KindLike, code: str, active: bool) -> BaseItemRead:
        """
        Activate or deactivate an item for one tenant.

        Global items get a tenant override row; tenant items are updated in place.
        """
        meta = get_kind_metadata(kind)
        self.tenants.require_tenant(tenant_id)
        store = self.store_for(meta.kind)

        item = store.find_by_code(tenant_id, meta.kind, code)
        if item is None:
            raise not_found("CatalogItem", code=code, kind=meta.kind.value, tenant_id=tenant_id)

        with self.transaction():
            if item.is_global:
                result = store.set_activation(tenant_id, meta.kind, code, bool(active))
            else:
                result = store.update(tenant_id, meta.kind, item.id, {"active": bool(active)})

        return result

    # ==================== INPUT PREPARATION ====================

    def _prepare(self, meta: KindMetadata, fields: Dict[str, Any], base_locale: str) -> Dict[str, Any]:
        """Trim text fields, clean overlays and coerce typed config values."""
        data = dict(fields)

        for key in _TEXT_FIELDS:
            if key in data:
                data[key] = clean_text(data[key])
        if "code" in data:
            data["code"] = derive_code(data["code"]) if data["code"] else None

        if "translations" in data:
            data["translations"] = overlay.clean(data["translations"], base_locale)
        if "slug_translations" in data:
            data["slug_translations"] = overlay.clean_slugs(data["slug_translations"], base_locale)
        if data.get("config") is not None:
            data["config"] = self._coerce_config(meta, data["config"])

        return data

    def _coerce_config(self, meta: KindMetadata, config: Dict[str, Any]) -> Dict[str, Any]:
        coerced = dict(config)
        for field in meta.fields.config:
            if field.key not in coerced:
                continue
            value = coerced[field.key]
            if field.field_type != "number":
                continue
            if value is None or (isinstance(value, str) and not value.strip()):
                coerced.pop(field.key)
                continue
            if isinstance(value, bool):
                raise validation_failed(f"config.{field.key}", value, "must be a number")
            try:
                number = float(value)
            except (TypeError, ValueError) as e:
                raise validation_failed(f"config.{field.key}", value, "must be a number", cause=e)
            coerced[field.key] = int(number) if number.is_integer() else number
        return coerced
