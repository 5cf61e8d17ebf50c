"""
Tenant service with direct SQLAlchemy access.

Besides tenant lookup it owns the per-tenant locale settings stored under
``tenant.config["locales"]``.
"""

import uuid
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import exists
from sqlalchemy.orm import Session

from ..context.operation_context import operation
from ..db.db_tenant_models import Tenant
from ..exceptions import ErrorCode, ValidationError, duplicate, not_found
from ..schemas.locale_schema import LocaleSettings
from ..schemas.tenant_schema import TenantCreate, TenantRead
from .base_service import SessionManagedService

LOCALES_CONFIG_KEY = "locales"


class TenantService(SessionManagedService):
    """
    Service for tenants and their locale settings.
    """

    def __init__(self, session: Optional[Session] = None):
        super().__init__(session=session)

    def _load(self, tenant_id: str) -> Tenant:
        tenant = self.session.query(Tenant).filter(Tenant.tenant_id == tenant_id).first()
        if tenant is None:
            raise not_found("Tenant", tenant_id=tenant_id)
        return tenant

    @operation()
    def create_tenant(self, tenant_data: TenantCreate) -> TenantRead:
        """
        Create a new tenant.

        Raises:
            ValidationError: If the tenant_id is already taken
        """
        if self.session.query(exists().where(Tenant.tenant_id == tenant_data.tenant_id)).scalar():
            raise duplicate("Tenant", tenant_id=tenant_data.tenant_id)

        with self.transaction():
            tenant = Tenant(
                id=str(uuid.uuid4()),
                tenant_id=tenant_data.tenant_id,
                name=tenant_data.name,
                slug=tenant_data.resolved_slug(),
                is_active=tenant_data.is_active,
                config=tenant_data.config or {},
            )
            self.session.add(tenant)

        self.logger.info(f"Created tenant: id={tenant.id}, tenant_id={tenant_data.tenant_id}")
        return TenantRead.model_validate(tenant)

    @operation()
    def get_tenant(self, tenant_id: str) -> TenantRead:
        """
        Get a tenant by tenant_id.

        Raises:
            NotFoundError: If the tenant doesn't exist
        """
        return TenantRead.model_validate(self._load(tenant_id))

    def require_tenant(self, tenant_id: Optional[str]) -> str:
        """Check a tenant id is present and known; returns it unchanged."""
        if not tenant_id:
            raise ValidationError(
                "A tenant is required for catalog operations",
                field="tenant_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )
        if not self.session.query(exists().where(Tenant.tenant_id == tenant_id)).scalar():
            raise not_found("Tenant", tenant_id=tenant_id)
        return tenant_id

    @operation()
    def list_tenants(self, limit: int = 100, offset: int = 0) -> List[TenantRead]:
        tenants = (
            self.session.query(Tenant)
            .order_by(Tenant.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [TenantRead.model_validate(t) for t in tenants]

    @operation()
    def get_locale_settings(self, tenant_id: str) -> LocaleSettings:
        """
        Locale settings of a tenant; the default set when none are configured.
        """
        tenant = self._load(tenant_id)
        raw = (tenant.config or {}).get(LOCALES_CONFIG_KEY)
        if not raw:
            return LocaleSettings.default()
        try:
            return LocaleSettings.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid locale settings for tenant {tenant_id}",
                field=LOCALES_CONFIG_KEY,
                error_code=ErrorCode.INVALID_FORMAT,
                cause=e,
                tenant_id=tenant_id,
            ) from e

    @operation()
    def update_locale_settings(self, tenant_id: str, settings: LocaleSettings) -> LocaleSettings:
        """Replace the locale settings of a tenant."""
        with self.transaction():
            tenant = self._load(tenant_id)
            config = dict(tenant.config or {})
            config[LOCALES_CONFIG_KEY] = settings.model_dump(mode="json")
            # New dict so the JSON column registers the change
            tenant.config = config

        self.logger.info(
            "Tenant locale settings updated",
            extra={"tenant": tenant_id, "locales": settings.enabled_codes()},
        )
        return settings
