"""
Store contract shared by the unified and the separate (domain table) backends.

Every query is scoped to the tenant's visible set: global rows
(``tenant_id IS NULL``) plus the rows owned by that tenant. The activation a
tenant sees for a global row is ``coalesce(override.active, row.active)``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import and_, false, func, or_, true
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.db_catalog_models import CatalogActivationOverride
from ..enums import CatalogKind
from ..exceptions import RepositoryError, duplicate, not_found, permission_denied
from ..schemas.catalog_schema import BaseItemRead
from ..utils.logger import get_logger

# Never written from caller-supplied fields
PROTECTED_FIELDS = frozenset(
    {"id", "tenant_id", "kind", "origin", "created_at", "updated_at", "catalog_kind", "tipo"}
)


class BaseKindStore(ABC):
    """CRUD and activation over one storage strategy."""

    read_schema: Type[BaseItemRead] = BaseItemRead

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger()

    # ==================== STORAGE HOOKS ====================

    @abstractmethod
    def model_for(self, kind: CatalogKind) -> Any:
        """Mapped class holding the rows of ``kind``."""

    def kind_filters(self, kind: CatalogKind) -> List[Any]:
        """Extra WHERE clauses selecting ``kind`` inside its table."""
        return []

    def new_row(self, kind: CatalogKind, tenant_id: str) -> Any:
        return self.model_for(kind)(tenant_id=tenant_id)

    def to_read(self, row: Any, active: Optional[bool] = None) -> BaseItemRead:
        return self.read_schema.from_row(row, active=active)

    # ==================== QUERY HELPERS ====================

    def _visible(self, model: Any, tenant_id: str):
        return or_(model.tenant_id.is_(None), model.tenant_id == tenant_id)

    def _override_join(self, model: Any, kind: CatalogKind, tenant_id: str):
        return and_(
            CatalogActivationOverride.tenant_id == tenant_id,
            CatalogActivationOverride.kind == kind.value,
            CatalogActivationOverride.code == model.code,
            model.tenant_id.is_(None),
        )

    def _effective_active(self, model: Any):
        return func.coalesce(CatalogActivationOverride.active, model.active)

    def _query(self, tenant_id: str, kind: CatalogKind):
        model = self.model_for(kind)
        return (
            self.session.query(model, CatalogActivationOverride.active)
            .outerjoin(CatalogActivationOverride, self._override_join(model, kind, tenant_id))
            .filter(self._visible(model, tenant_id), *self.kind_filters(kind))
        )

    def _to_reads(self, rows) -> List[BaseItemRead]:
        return [self.to_read(row, active=override) for row, override in rows]

    def _owned_row(self, tenant_id: str, kind: CatalogKind, item_id: str, action: str) -> Any:
        """Load a row the tenant may edit; global rows are visible but read-only."""
        model = self.model_for(kind)
        row = (
            self.session.query(model)
            .filter(
                model.id == item_id,
                self._visible(model, tenant_id),
                *self.kind_filters(kind),
            )
            .first()
        )
        if row is None:
            raise not_found("CatalogItem", item_id=item_id, kind=kind.value, tenant_id=tenant_id)
        if row.tenant_id is None:
            raise permission_denied(
                action, "global catalog item", item_id=item_id, kind=kind.value, code=row.code
            )
        return row

    def _assign(self, row: Any, fields: Dict[str, Any]) -> None:
        """Copy fields onto the row; fields the table has no column for are ignored."""
        columns = {attr.key for attr in sa_inspect(type(row)).column_attrs}
        for key, value in fields.items():
            if key in PROTECTED_FIELDS:
                continue
            if key == "metadata":
                key = "extra_data"
            if key in columns:
                setattr(row, key, value)

    def _flush(self, kind: CatalogKind, code: Optional[str], tenant_id: str) -> None:
        try:
            self.session.flush()
        except IntegrityError as e:
            raise duplicate("CatalogItem", cause=e, kind=kind.value, code=code) from e
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to write {kind.value} item: {str(e)}",
                cause=e,
                kind=kind.value,
                code=code,
                tenant_id=tenant_id,
            ) from e

    # ==================== CONTRACT ====================

    def list(
        self, tenant_id: str, kind: CatalogKind, include_inactive: bool = False
    ) -> List[BaseItemRead]:
        """Merged view for the tenant: globals first within equal order, then by name."""
        model = self.model_for(kind)
        query = self._query(tenant_id, kind)
        if not include_inactive:
            query = query.filter(self._effective_active(model) == true())
        rows = query.order_by(model.order, model.tenant_id.isnot(None), model.name).all()
        return self._to_reads(rows)

    def get(self, tenant_id: str, kind: CatalogKind, item_id: str) -> Optional[BaseItemRead]:
        model = self.model_for(kind)
        result = self._query(tenant_id, kind).filter(model.id == item_id).first()
        if result is None:
            return None
        row, override = result
        return self.to_read(row, active=override)

    def find_by_code(
        self, tenant_id: str, kind: CatalogKind, code: str, exclude_id: Optional[str] = None
    ) -> Optional[BaseItemRead]:
        model = self.model_for(kind)
        query = self._query(tenant_id, kind).filter(model.code == code)
        if exclude_id:
            query = query.filter(model.id != exclude_id)
        # Tenant rows shadow globals if both exist
        result = query.order_by(model.tenant_id.isnot(None).desc()).first()
        if result is None:
            return None
        row, override = result
        return self.to_read(row, active=override)

    def create(self, tenant_id: str, kind: CatalogKind, fields: Dict[str, Any]) -> BaseItemRead:
        row = self.new_row(kind, tenant_id)
        self._assign(row, fields)
        self.session.add(row)
        self._flush(kind, fields.get("code"), tenant_id)
        self.logger.info(
            "Catalog item created",
            extra={"kind": kind.value, "code": row.code, "item_id": row.id, "tenant_id": tenant_id},
        )
        return self.to_read(row)

    def update(
        self, tenant_id: str, kind: CatalogKind, item_id: str, fields: Dict[str, Any]
    ) -> BaseItemRead:
        row = self._owned_row(tenant_id, kind, item_id, "update")
        self._assign(row, fields)
        self._flush(kind, row.code, tenant_id)
        self.logger.info(
            "Catalog item updated",
            extra={"kind": kind.value, "item_id": item_id, "fields": sorted(fields)},
        )
        return self.to_read(row)

    def delete(self, tenant_id: str, kind: CatalogKind, item_id: str) -> None:
        row = self._owned_row(tenant_id, kind, item_id, "delete")
        self.session.delete(row)
        self._flush(kind, row.code, tenant_id)
        self.logger.info(
            "Catalog item deleted",
            extra={"kind": kind.value, "item_id": item_id, "code": row.code},
        )

    def count(self, tenant_id: str, kind: CatalogKind, active: Optional[bool] = None) -> int:
        """Count visible items without loading rows; ``active`` filters on effective activation."""
        model = self.model_for(kind)
        query = (
            self.session.query(func.count(model.id))
            .outerjoin(CatalogActivationOverride, self._override_join(model, kind, tenant_id))
            .filter(self._visible(model, tenant_id), *self.kind_filters(kind))
        )
        if active is not None:
            query = query.filter(self._effective_active(model) == (true() if active else false()))
        return query.scalar() or 0

    def next_order(self, tenant_id: str, kind: CatalogKind) -> int:
        """Sort key placing a new item after every visible one."""
        model = self.model_for(kind)
        highest = (
            self.session.query(func.max(model.order))
            .filter(self._visible(model, tenant_id), *self.kind_filters(kind))
            .scalar()
        )
        return 0 if highest is None else highest + 1

    def set_activation(
        self, tenant_id: str, kind: CatalogKind, code: str, active: bool
    ) -> BaseItemRead:
        """
        Record whether a global item is active for one tenant.

        The global row is never touched; the override row is created or updated.
        """
        model = self.model_for(kind)
        row = (
            self.session.query(model)
            .filter(model.code == code, model.tenant_id.is_(None), *self.kind_filters(kind))
            .first()
        )
        if row is None:
            raise not_found("CatalogItem", code=code, kind=kind.value, tenant_id=tenant_id)

        override = (
            self.session.query(CatalogActivationOverride)
            .filter(
                CatalogActivationOverride.tenant_id == tenant_id,
                CatalogActivationOverride.kind == kind.value,
                CatalogActivationOverride.code == code,
            )
            .first()
        )
        if override is None:
            override = CatalogActivationOverride(
                tenant_id=tenant_id, kind=kind.value, code=code, active=active
            )
            self.session.add(override)
        else:
            override.active = active
        self._flush(kind, code, tenant_id)

        self.logger.info(
            "Activation override recorded",
            extra={"kind": kind.value, "code": code, "active": active},
        )
        return self.to_read(row, active=active)

    def clear_defaults(self, tenant_id: str, kind: CatalogKind, keep_id: Optional[str]) -> int:
        """Unflag every other tenant-owned default of the kind."""
        model = self.model_for(kind)
        query = self.session.query(model).filter(
            model.tenant_id == tenant_id,
            model.is_default == true(),
            *self.kind_filters(kind),
        )
        if keep_id:
            query = query.filter(model.id != keep_id)
        cleared = 0
        for row in query.all():
            row.is_default = False
            cleared += 1
        return cleared
