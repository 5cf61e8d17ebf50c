"""Transports between the resolver and the catalog store."""

from .base import CatalogTransport
from .http_transport import HttpCatalogTransport
from .local_transport import LocalCatalogTransport

__all__ = ["CatalogTransport", "HttpCatalogTransport", "LocalCatalogTransport"]
