"""
Process-wide cache of resolved catalogs, keyed by tenant.

A tenant's ``CatalogState`` is never mutated in place: every refresh builds a
new state and swaps it in, so readers always see one consistent snapshot.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..db.db_base import utc_now
from ..enums import CatalogKind
from ..schemas.catalog_schema import CatalogItemRead, DomainItemRead
from ..schemas.locale_schema import LocaleSettings


class CatalogState(BaseModel):
    """Everything the resolver knows about one tenant's catalogs."""

    tenant_id: str
    catalogs: Dict[CatalogKind, List[CatalogItemRead]] = Field(default_factory=dict)
    separate: Dict[CatalogKind, List[DomainItemRead]] = Field(default_factory=dict)
    counts: Dict[CatalogKind, int] = Field(default_factory=dict)
    locales: Optional[LocaleSettings] = None
    fetched_at: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)


class CatalogCache:
    """Thread-safe tenant → ``CatalogState`` map with wholesale replacement."""

    def __init__(self):
        self._states: Dict[str, CatalogState] = {}
        self._lock = threading.Lock()

    def get(self, tenant_id: Optional[str]) -> Optional[CatalogState]:
        if not tenant_id:
            return None
        with self._lock:
            return self._states.get(tenant_id)

    def update(self, tenant_id: str, **changes) -> CatalogState:
        """Swap in a copy of the tenant's state with ``changes`` applied."""
        with self._lock:
            current = self._states.get(tenant_id) or CatalogState(tenant_id=tenant_id)
            state = current.model_copy(update={**changes, "fetched_at": utc_now()})
            self._states[tenant_id] = state
        return state

    def update_separate(self, tenant_id: str, kind: CatalogKind, items: List[DomainItemRead]) -> CatalogState:
        """Replace one separate kind's items, keeping the other kinds already cached."""
        with self._lock:
            current = self._states.get(tenant_id) or CatalogState(tenant_id=tenant_id)
            state = current.model_copy(
                update={"separate": {**current.separate, kind: items}, "fetched_at": utc_now()}
            )
            self._states[tenant_id] = state
        return state

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


_catalog_cache = CatalogCache()


def get_catalog_cache() -> CatalogCache:
    """The process-wide cache shared by resolvers that are not given their own."""
    return _catalog_cache
