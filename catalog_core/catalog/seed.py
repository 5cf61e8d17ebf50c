"""
Seeding of global (system-defined) catalog items.

Global rows are never created through tenant-facing flows; deployments load
them with ``seed_global_items`` (or an Alembic data migration calling it).
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from ..db.db_catalog_models import CatalogItem
from ..db.db_domain_models import DOMAIN_MODELS
from ..enums import CatalogKind, StorageStrategy
from ..utils.logger import get_logger
from ..utils.text_utils import derive_code
from .kind_registry import get_kind_metadata

logger = get_logger()

DEFAULT_GLOBAL_ITEMS: Dict[CatalogKind, List[Dict[str, Any]]] = {
    CatalogKind.CONTACT_TYPE: [
        {"name": "Cliente", "name_plural": "Clientes", "icon": "user", "is_default": True},
        {"name": "Propietario", "name_plural": "Propietarios", "icon": "home"},
        {"name": "Desarrollador", "name_plural": "Desarrolladores", "icon": "building"},
    ],
    CatalogKind.ACTIVITY_TYPE: [
        {"name": "Llamada", "icon": "phone"},
        {"name": "Reunión", "icon": "users"},
        {"name": "Visita", "icon": "map-pin"},
        {"name": "Email", "icon": "mail"},
    ],
    CatalogKind.ADVISOR_LEVEL: [
        {"name": "Senior", "config": {"commission_percentage": 50}},
        {"name": "Junior", "config": {"commission_percentage": 30}},
    ],
    CatalogKind.PROPERTY_TYPE: [
        {"name": "Casa", "name_plural": "Casas", "slug": "casa", "translations": {"en": {"name": "House"}}},
        {"name": "Apartamento", "name_plural": "Apartamentos", "slug": "apartamento",
         "translations": {"en": {"name": "Apartment"}}},
        {"name": "Terreno", "name_plural": "Terrenos", "slug": "terreno",
         "translations": {"en": {"name": "Land"}}},
    ],
    CatalogKind.OPERATION_TYPE: [
        {"name": "Venta", "slug": "venta", "is_default": True, "translations": {"en": {"name": "Sale"}}},
        {"name": "Alquiler", "slug": "alquiler", "translations": {"en": {"name": "Rent"}}},
    ],
    CatalogKind.AMENITY: [
        {"name": "Piscina", "category": "Áreas comunes", "translations": {"en": {"name": "Pool"}}},
        {"name": "Wifi", "code": "wifi", "category": "Servicios"},
        {"name": "Gimnasio", "category": "Áreas comunes", "translations": {"en": {"name": "Gym"}}},
    ],
    CatalogKind.SALE_STATUS: [
        {"name": "En proceso"},
        {"name": "Completada", "is_final": True},
        {"name": "Cancelada", "is_final": True},
    ],
}


def seed_global_items(
    session: Session,
    definitions: Optional[Mapping[CatalogKind, List[Dict[str, Any]]]] = None,
) -> int:
    """
    Insert missing global items; existing global codes are left untouched.

    Args:
        session: Open session; the caller commits
        definitions: Items per kind (defaults to DEFAULT_GLOBAL_ITEMS)

    Returns:
        Number of rows inserted
    """
    definitions = DEFAULT_GLOBAL_ITEMS if definitions is None else definitions
    inserted = 0

    for kind, items in definitions.items():
        meta = get_kind_metadata(kind)
        if meta.storage == StorageStrategy.UNIFIED:
            model = CatalogItem
            scope = [CatalogItem.kind == meta.kind.value]
        else:
            model = DOMAIN_MODELS[meta.kind]
            scope = []

        existing = {
            code for (code,) in session.query(model.code).filter(model.tenant_id.is_(None), *scope)
        }

        for position, definition in enumerate(items):
            fields = dict(definition)
            code = fields.pop("code", None) or derive_code(fields["name"])
            if code in existing:
                continue
            fields.setdefault("order", position)
            if model is CatalogItem:
                fields["kind"] = meta.kind.value
            row = model(tenant_id=None, code=code)
            for key, value in fields.items():
                if hasattr(model, key):
                    setattr(row, key, value)
            session.add(row)
            existing.add(code)
            inserted += 1

    session.flush()
    logger.info("Global catalog items seeded", extra={"inserted": inserted})
    return inserted
