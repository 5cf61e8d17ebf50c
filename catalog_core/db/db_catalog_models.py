"""
Unified catalog table and tenant activation overrides.

Global rows carry ``tenant_id = NULL``; tenant rows extend the global set for
exactly one tenant. ``origin`` is derived from ``tenant_id`` and never stored.
"""

from sqlalchemy import Boolean, Column, Index, Integer, String, Text, UniqueConstraint

from ..enums import ItemOrigin
from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class CatalogItemColumns:
    """Columns shared by the unified table and every domain table."""

    tenant_id = Column(String(100), nullable=True, index=True)
    code = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    name_plural = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    icon = Column(String(100), nullable=True)
    color = Column(String(20), nullable=True)
    order = Column("sort_order", Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    is_default = Column(Boolean, nullable=False, default=False)
    translations = Column(JSON, nullable=True)

    @property
    def origin(self) -> ItemOrigin:
        return ItemOrigin.GLOBAL if self.tenant_id is None else ItemOrigin.TENANT


class CatalogItem(Base, UUIDMixin, TimestampMixin, CatalogItemColumns):
    """Item of a unified kind, discriminated by ``kind``."""

    __tablename__ = "catalog_item"

    kind = Column(String(50), nullable=False)
    config = Column(JSON, nullable=True)
    extra_data = Column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_catalog_item_kind_tenant", "kind", "tenant_id"),
        UniqueConstraint("tenant_id", "kind", "code", name="uq_catalog_item_tenant_kind_code"),
    )

    def __repr__(self) -> str:
        return f"<CatalogItem {self.kind}:{self.code} tenant={self.tenant_id}>"


class CatalogActivationOverride(Base, UUIDMixin, TimestampMixin):
    """Per-tenant activation of a global item, keyed by (tenant_id, kind, code)."""

    __tablename__ = "catalog_activation_override"

    tenant_id = Column(String(100), nullable=False)
    kind = Column(String(50), nullable=False)
    code = Column(String(100), nullable=False)
    active = Column(Boolean, nullable=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "kind", "code", name="uq_activation_override_tenant_kind_code"),
    )
