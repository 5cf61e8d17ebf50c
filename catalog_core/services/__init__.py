"""Service layer over the catalog stores."""

from .base_service import SessionManagedService
from .catalog_service import CatalogService
from .tenant_service import TenantService

__all__ = ["SessionManagedService", "CatalogService", "TenantService"]
