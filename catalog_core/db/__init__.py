"""
SQLAlchemy models and database management for the catalog engine.
"""

from .db_base import JSON, TimestampMixin, UUIDMixin, new_id, utc_now
from .db_catalog_models import CatalogActivationOverride, CatalogItem, CatalogItemColumns
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    get_db_manager,
    get_development_config,
    get_production_config,
    import_all_models,
    init_db,
    initialize_db,
    set_db_manager,
)
from .db_domain_models import (
    DOMAIN_MODELS,
    Amenity,
    ContactExtension,
    DomainItemMixin,
    LeadSource,
    OperationType,
    PropertyType,
    SaleStatus,
)
from .db_tenant_models import Tenant

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "UUIDMixin",
    "utc_now",
    "new_id",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "get_db_manager",
    "get_development_config",
    "get_production_config",
    "import_all_models",
    "init_db",
    "initialize_db",
    "set_db_manager",
    # Models
    "CatalogItem",
    "CatalogItemColumns",
    "CatalogActivationOverride",
    "DOMAIN_MODELS",
    "DomainItemMixin",
    "PropertyType",
    "OperationType",
    "SaleStatus",
    "Amenity",
    "ContactExtension",
    "LeadSource",
    "Tenant",
]
