"""Unified kinds: one polymorphic table discriminated by ``kind``."""

from typing import Any, List, Optional

from ..db.db_catalog_models import CatalogItem
from ..enums import CatalogKind
from ..schemas.catalog_schema import CatalogItemRead
from .base_store import BaseKindStore


class UnifiedKindStore(BaseKindStore):
    read_schema = CatalogItemRead

    def model_for(self, kind: CatalogKind) -> Any:
        return CatalogItem

    def kind_filters(self, kind: CatalogKind) -> List[Any]:
        return [CatalogItem.kind == kind.value]

    def new_row(self, kind: CatalogKind, tenant_id: str) -> CatalogItem:
        return CatalogItem(tenant_id=tenant_id, kind=kind.value)

    def kind_of(self, tenant_id: str, item_id: str) -> Optional[CatalogKind]:
        """Kind of a visible item, for routes that address items by id alone."""
        kind = (
            self.session.query(CatalogItem.kind)
            .filter(CatalogItem.id == item_id, self._visible(CatalogItem, tenant_id))
            .scalar()
        )
        return CatalogKind(kind) if kind else None
