"""Tenant-scoped catalog resolution over a transport and a shared cache."""

from .catalog_cache import CatalogCache, CatalogState, get_catalog_cache
from .catalog_resolver import CatalogResolver

__all__ = ["CatalogCache", "CatalogState", "CatalogResolver", "get_catalog_cache"]
