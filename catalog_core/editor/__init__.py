"""Editor state machine for catalog screens."""

from .catalog_editor import CatalogEditor, CatalogForm, LocaleTab

__all__ = ["CatalogEditor", "CatalogForm", "LocaleTab"]
