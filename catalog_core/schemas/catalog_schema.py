"""
Pydantic schemas for catalog items.

Read schemas are what stores return and what travels over the JSON contract.
``origin`` is computed from ``tenant_id`` and never accepted as input.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from sqlalchemy import inspect as sa_inspect

from ..catalog.kind_registry import parse_kind
from ..enums import CatalogKind, ItemOrigin

Translations = Dict[str, Dict[str, Optional[str]]]


def _row_to_dict(obj: Any) -> Dict[str, Any]:
    """Column attributes of an ORM row keyed by attribute name."""
    return {attr.key: getattr(obj, attr.key) for attr in sa_inspect(obj).mapper.column_attrs}


class BaseItemRead(BaseModel):
    """Fields every catalog item exposes, whatever its backing store."""

    id: str
    tenant_id: Optional[str] = None
    code: str
    name: str
    name_plural: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0
    active: bool = True
    is_default: bool = False
    translations: Translations = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def drop_derived_fields(cls, data):
        if isinstance(data, dict) and "origin" in data:
            data = {k: v for k, v in data.items() if k != "origin"}
        return data

    @field_validator("translations", mode="before")
    def none_as_empty(cls, v):
        return v or {}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def origin(self) -> ItemOrigin:
        return ItemOrigin.GLOBAL if self.tenant_id is None else ItemOrigin.TENANT

    @property
    def is_global(self) -> bool:
        return self.tenant_id is None

    @classmethod
    def from_row(cls, row: Any, active: Optional[bool] = None):
        """
        Build the read schema from an ORM row.

        Args:
            row: Mapped instance of the unified table or a domain table
            active: Effective activation when an override applies to the row
        """
        data = _row_to_dict(row)
        if active is not None:
            data["active"] = active
        return cls.model_validate(data)


class CatalogItemRead(BaseItemRead):
    kind: CatalogKind
    config: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("extra_data", "metadata"),
    )

    @field_validator("config", "metadata", mode="before")
    def none_as_empty_map(cls, v):
        return v or {}


class DomainItemRead(BaseItemRead):
    """Item of a separate-store kind; domain columns travel as extra fields."""

    kind: Optional[CatalogKind] = None
    slug_translations: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, extra="allow")

    @field_validator("slug_translations", mode="before")
    def none_as_empty_slugs(cls, v):
        return v or {}

    @classmethod
    def from_row(cls, row: Any, active: Optional[bool] = None):
        data = _row_to_dict(row)
        data["kind"] = getattr(row, "catalog_kind", None)
        if active is not None:
            data["active"] = active
        return cls.model_validate(data)

    @property
    def domain_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class ItemWriteFields(BaseModel):
    """Common writable fields; unset fields are left untouched on update."""

    code: Optional[str] = Field(default=None, max_length=100)
    name: Optional[str] = Field(default=None, max_length=200)
    name_plural: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    icon: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = Field(default=None, max_length=20)
    order: Optional[int] = None
    active: Optional[bool] = None
    is_default: Optional[bool] = None
    translations: Optional[Translations] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly supplied by the caller."""
        return self.model_dump(exclude_unset=True)


class CatalogItemCreate(ItemWriteFields):
    kind: CatalogKind = Field(validation_alias=AliasChoices("tipo", "kind"))
    config: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("kind", mode="before")
    def accept_kind_aliases(cls, v):
        return parse_kind(v)


class CatalogItemUpdate(ItemWriteFields):
    config: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class DomainItemCreate(ItemWriteFields):
    slug_translations: Optional[Dict[str, str]] = None

    # Domain columns (slug, category, channel, ...) pass through as extras
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class DomainItemUpdate(DomainItemCreate):
    pass


class ActivationToggle(BaseModel):
    """Body of the toggle routes: ``{"activo": bool}``."""

    active: bool = Field(validation_alias=AliasChoices("activo", "active"))


CatalogMap = Dict[CatalogKind, List[CatalogItemRead]]
