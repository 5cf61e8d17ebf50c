"""
Enums used across the catalog_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class CatalogKind(str, enum.Enum):
    """Every configurable taxonomy known to the engine."""

    # Unified store
    CONTACT_TYPE = "contact_type"
    ACTIVITY_TYPE = "activity_type"
    PROPERTY_LABEL = "property_label"
    DOCUMENT_TYPE = "document_type"
    ADVISOR_SPECIALTY = "advisor_specialty"
    ADVISOR_LEVEL = "advisor_level"

    # Separate (domain) stores
    PROPERTY_TYPE = "property_type"
    OPERATION_TYPE = "operation_type"
    SALE_STATUS = "sale_status"
    AMENITY = "amenity"
    CONTACT_EXTENSION = "contact_extension"
    LEAD_SOURCE = "lead_source"


class StorageStrategy(str, enum.Enum):
    """Where the items of a kind are persisted."""

    UNIFIED = "unified"
    SEPARATE = "separate"


class ItemOrigin(str, enum.Enum):
    """Derived ownership of an item."""

    GLOBAL = "global"
    TENANT = "tenant"


class EditorMode(str, enum.Enum):
    """States of a catalog editor screen."""

    VIEWING = "viewing"
    CREATING = "creating"
    EDITING = "editing"
    SAVING = "saving"
