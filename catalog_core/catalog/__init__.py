"""Kind metadata registry and global item seeding."""

from .kind_registry import (
    KIND_METADATA,
    ConfigField,
    KindFields,
    KindMetadata,
    get_kind_metadata,
    parse_kind,
    require_kind,
    separate_kinds,
    storage_for,
    unified_kinds,
)

__all__ = [
    "KIND_METADATA",
    "ConfigField",
    "KindFields",
    "KindMetadata",
    "get_kind_metadata",
    "parse_kind",
    "require_kind",
    "separate_kinds",
    "storage_for",
    "unified_kinds",
]
