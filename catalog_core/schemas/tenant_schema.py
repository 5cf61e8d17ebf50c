"""
Pydantic schemas for tenants.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ErrorCode, ValidationError
from ..utils.text_utils import slugify


class TenantCreate(BaseModel):
    """
    Schema for creating a new tenant.
    """

    tenant_id: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=200)
    is_active: bool = Field(default=True)
    config: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("tenant_id")
    def validate_tenant_id(cls, v: str) -> str:
        if not v.strip():
            raise ValidationError(
                "tenant_id must not be blank",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="tenant_id",
                value=v,
            )
        return v.strip()

    def resolved_slug(self) -> str:
        return self.slug or slugify(self.name)


class TenantRead(BaseModel):
    """
    Schema for reading tenant data.
    """

    id: str
    tenant_id: str
    name: str
    slug: Optional[str] = None
    is_active: bool = True
    config: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def get_config_value(self, key: str, default: Any = None) -> Any:
        """Read a top-level key of the tenant config."""
        if not self.config:
            return default
        return self.config.get(key, default)
