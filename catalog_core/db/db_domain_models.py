"""
Dedicated tables for the separate-store kinds.

Each table repeats the common catalog columns and adds its own domain fields.
"""

from typing import Dict, Type

from sqlalchemy import Boolean, Column, String, UniqueConstraint
from sqlalchemy.orm import declared_attr

from ..constants import DEFAULT_AMENITY_CATEGORY
from ..enums import CatalogKind
from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_catalog_models import CatalogItemColumns
from .db_config import Base


class DomainItemMixin(UUIDMixin, TimestampMixin, CatalogItemColumns):
    """Common shape of a domain item; ``slug_translations`` maps locale to slug."""

    slug_translations = Column(JSON, nullable=True)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint("tenant_id", "code", name=f"uq_{cls.__tablename__}_tenant_code"),
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code} tenant={self.tenant_id}>"


class PropertyType(Base, DomainItemMixin):
    __tablename__ = "property_type"
    catalog_kind = CatalogKind.PROPERTY_TYPE

    slug = Column(String(200), nullable=True)


class OperationType(Base, DomainItemMixin):
    __tablename__ = "operation_type"
    catalog_kind = CatalogKind.OPERATION_TYPE

    slug = Column(String(200), nullable=True)


class SaleStatus(Base, DomainItemMixin):
    __tablename__ = "sale_status"
    catalog_kind = CatalogKind.SALE_STATUS

    is_final = Column(Boolean, nullable=False, default=False)


class Amenity(Base, DomainItemMixin):
    __tablename__ = "amenity"
    catalog_kind = CatalogKind.AMENITY

    category = Column(String(100), nullable=False, default=DEFAULT_AMENITY_CATEGORY)


class ContactExtension(Base, DomainItemMixin):
    __tablename__ = "contact_extension"
    catalog_kind = CatalogKind.CONTACT_EXTENSION

    field_schema = Column(JSON, nullable=True)


class LeadSource(Base, DomainItemMixin):
    __tablename__ = "lead_source"
    catalog_kind = CatalogKind.LEAD_SOURCE

    channel = Column(String(100), nullable=True)


DOMAIN_MODELS: Dict[CatalogKind, Type[DomainItemMixin]] = {
    model.catalog_kind: model
    for model in (PropertyType, OperationType, SaleStatus, Amenity, ContactExtension, LeadSource)
}
