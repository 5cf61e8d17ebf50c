"""
Static metadata for every catalog kind.

The registry is the single place that knows whether a kind lives in the
unified table or in its own domain table, and which optional fields the
editor should offer for it.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..enums import CatalogKind, StorageStrategy
from ..exceptions import ErrorCode, ValidationError


class ConfigField(BaseModel):
    """Scalar stored in the item ``config`` map (e.g. commission percentage)."""

    key: str
    label: str
    field_type: str = Field(default="text", pattern="^(text|number|boolean)$")

    model_config = ConfigDict(frozen=True)


class KindFields(BaseModel):
    """Optional item fields the editor offers for a kind."""

    name_label: str = "Name"
    name_plural: bool = False
    description: bool = True
    icon: bool = False
    color: bool = False
    config: List[ConfigField] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class KindMetadata(BaseModel):
    kind: CatalogKind
    title: str
    description: str
    icon: str
    color: str
    storage: StorageStrategy = StorageStrategy.UNIFIED
    supports_translations: bool = False
    supports_slug_translations: bool = False
    approval_gated: bool = False
    show_count: bool = True
    legacy_codes: List[str] = Field(default_factory=list)
    fields: KindFields = Field(default_factory=KindFields)

    model_config = ConfigDict(frozen=True)

    @property
    def is_separate(self) -> bool:
        return self.storage == StorageStrategy.SEPARATE


_FULL_FIELDS = KindFields(name_plural=True, description=True, icon=True, color=True)

KIND_METADATA: Dict[CatalogKind, KindMetadata] = {
    meta.kind: meta
    for meta in [
        KindMetadata(
            kind=CatalogKind.PROPERTY_TYPE,
            title="Property types",
            description="House, apartment, commercial unit, land, etc.",
            icon="home",
            color="#3b82f6",
            storage=StorageStrategy.SEPARATE,
            supports_translations=True,
            supports_slug_translations=True,
            legacy_codes=["tipo_propiedad", "tipos_propiedad", "categorias_propiedad"],
            fields=_FULL_FIELDS,
        ),
        KindMetadata(
            kind=CatalogKind.OPERATION_TYPE,
            title="Operation types",
            description="Sale, rent, transfer, etc.",
            icon="key",
            color="#10b981",
            storage=StorageStrategy.SEPARATE,
            supports_translations=True,
            supports_slug_translations=True,
            legacy_codes=["tipo_operacion", "tipos_operacion"],
            fields=_FULL_FIELDS,
        ),
        KindMetadata(
            kind=CatalogKind.AMENITY,
            title="Custom amenities",
            description="Pool, gym, security, etc.",
            icon="sparkles",
            color="#6366f1",
            storage=StorageStrategy.SEPARATE,
            supports_translations=True,
            approval_gated=True,
            legacy_codes=["amenidades", "amenidad"],
            fields=KindFields(description=False, icon=True),
        ),
        KindMetadata(
            kind=CatalogKind.CONTACT_TYPE,
            title="Contact types",
            description="Client, owner, developer, etc.",
            icon="user",
            color="#8b5cf6",
            legacy_codes=["tipo_contacto", "tipos_contacto"],
            fields=_FULL_FIELDS,
        ),
        KindMetadata(
            kind=CatalogKind.CONTACT_EXTENSION,
            title="Contact extensions",
            description="Lead, client, advisor, developer, etc.",
            icon="puzzle",
            color="#7c3aed",
            storage=StorageStrategy.SEPARATE,
            supports_translations=True,
            legacy_codes=["extensiones_contacto", "extension_contacto"],
            fields=KindFields(icon=True, color=True),
        ),
        KindMetadata(
            kind=CatalogKind.LEAD_SOURCE,
            title="Lead sources",
            description="Web, referral, portals, social networks, etc.",
            icon="target",
            color="#f59e0b",
            storage=StorageStrategy.SEPARATE,
            show_count=False,
            legacy_codes=["fuentes_lead", "fuente_lead"],
            fields=KindFields(icon=True, color=True),
        ),
        KindMetadata(
            kind=CatalogKind.ACTIVITY_TYPE,
            title="Activity types",
            description="Call, meeting, visit, email, etc.",
            icon="phone",
            color="#f59e0b",
            legacy_codes=["tipo_actividad", "tipos_actividad"],
            fields=_FULL_FIELDS,
        ),
        KindMetadata(
            kind=CatalogKind.PROPERTY_LABEL,
            title="Property labels",
            description="Exclusive, featured, reduced, new, etc.",
            icon="tag",
            color="#ec4899",
            supports_translations=True,
            legacy_codes=["etiqueta_propiedad", "etiquetas_propiedad"],
            fields=KindFields(icon=True, color=True),
        ),
        KindMetadata(
            kind=CatalogKind.DOCUMENT_TYPE,
            title="Document types",
            description="ID card, passport, tax id, license, etc.",
            icon="file-text",
            color="#64748b",
            legacy_codes=["tipo_documento", "tipos_documento"],
        ),
        KindMetadata(
            kind=CatalogKind.ADVISOR_SPECIALTY,
            title="Advisor specialties",
            description="Residential, commercial, industrial, luxury, etc.",
            icon="briefcase",
            color="#0891b2",
            supports_translations=True,
            legacy_codes=["especialidad_asesor", "especialidades_asesor"],
            fields=_FULL_FIELDS,
        ),
        KindMetadata(
            kind=CatalogKind.ADVISOR_LEVEL,
            title="Advisor levels",
            description="Levels with commission percentage: senior, junior, etc.",
            icon="users",
            color="#7c3aed",
            legacy_codes=["tipo_asesor", "tipos_asesor", "nivel_asesor"],
            fields=KindFields(
                color=True,
                config=[
                    ConfigField(
                        key="commission_percentage", label="Commission %", field_type="number"
                    )
                ],
            ),
        ),
        KindMetadata(
            kind=CatalogKind.SALE_STATUS,
            title="Sale statuses",
            description="In progress, completed, cancelled, etc.",
            icon="circle-dollar-sign",
            color="#059669",
            storage=StorageStrategy.SEPARATE,
            legacy_codes=["estado_venta", "estados_venta"],
        ),
    ]
}

_KIND_ALIASES: Dict[str, CatalogKind] = {
    alias: meta.kind for meta in KIND_METADATA.values() for alias in meta.legacy_codes
}


def parse_kind(value: Union[str, CatalogKind, None]) -> CatalogKind:
    """
    Resolve a kind from its code or one of its legacy wire codes.

    Raises:
        ValidationError: If the value names no known kind
    """
    if isinstance(value, CatalogKind):
        return value
    raw = str(value or "").strip().lower()
    try:
        return CatalogKind(raw)
    except ValueError:
        pass
    if raw in _KIND_ALIASES:
        return _KIND_ALIASES[raw]
    raise ValidationError(
        f"Unknown catalog kind: {value}",
        field="kind",
        error_code=ErrorCode.INVALID_FORMAT,
        value=value,
    )


def get_kind_metadata(kind: Union[str, CatalogKind]) -> KindMetadata:
    return KIND_METADATA[parse_kind(kind)]


def storage_for(kind: Union[str, CatalogKind]) -> StorageStrategy:
    return get_kind_metadata(kind).storage


def unified_kinds() -> List[CatalogKind]:
    return [k for k, meta in KIND_METADATA.items() if meta.storage == StorageStrategy.UNIFIED]


def separate_kinds(counted_only: bool = False) -> List[CatalogKind]:
    """Separate-store kinds; ``counted_only`` keeps those shown with a count badge."""
    return [
        k
        for k, meta in KIND_METADATA.items()
        if meta.storage == StorageStrategy.SEPARATE and (meta.show_count or not counted_only)
    ]


def require_kind(kind: Union[str, CatalogKind], storage: StorageStrategy) -> CatalogKind:
    """Parse a kind and check it is served by the given storage strategy."""
    parsed = parse_kind(kind)
    if KIND_METADATA[parsed].storage != storage:
        raise ValidationError(
            f"Catalog kind '{parsed.value}' is not a {storage.value} kind",
            field="kind",
            error_code=ErrorCode.CONSTRAINT_VIOLATION,
            value=parsed.value,
        )
    return parsed


def config_field(kind: Union[str, CatalogKind], key: str) -> Optional[ConfigField]:
    for field in get_kind_metadata(kind).fields.config:
        if field.key == key:
            return field
    return None
