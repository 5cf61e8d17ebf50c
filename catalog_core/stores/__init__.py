"""
Kind stores: one contract over the unified table and the domain tables.
"""

from typing import Union

from sqlalchemy.orm import Session

from ..catalog.kind_registry import get_kind_metadata
from ..enums import CatalogKind, StorageStrategy
from .base_store import BaseKindStore
from .separate_store import SeparateKindStore
from .unified_store import UnifiedKindStore

_STORES = {
    StorageStrategy.UNIFIED: UnifiedKindStore,
    StorageStrategy.SEPARATE: SeparateKindStore,
}


def get_store(kind: Union[str, CatalogKind], session: Session) -> BaseKindStore:
    """Store implementation backing ``kind``, picked from the kind metadata table."""
    return _STORES[get_kind_metadata(kind).storage](session)


__all__ = ["BaseKindStore", "SeparateKindStore", "UnifiedKindStore", "get_store"]
