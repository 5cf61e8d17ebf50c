"""JSON contract handlers."""

from .handlers import ApiResponse, CatalogApiHandlers, include_inactive

__all__ = ["ApiResponse", "CatalogApiHandlers", "include_inactive"]
