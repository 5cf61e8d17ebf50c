"""
Tenant model.

Just the data structure; locale settings live in ``config["locales"]``.
"""

from sqlalchemy import Boolean, Column, String

from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class Tenant(Base, UUIDMixin, TimestampMixin):
    """Organization that owns tenant-scoped catalog items."""

    __tablename__ = "tenant"

    # Standard UUID primary key + separate business tenant_id
    tenant_id = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    config = Column(JSON, nullable=True)
