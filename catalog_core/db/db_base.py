"""
Column types and mixins shared by the catalog tables.

Translations, item metadata, tenant config and contact extension field
schemas are stored as JSON: native JSONB on PostgreSQL, text on SQLite.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator

from ..utils.json_utils import dumps, loads, to_jsonable


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


class JSON(TypeDecorator):
    """
    JSON column for catalog payloads.

    Values pass through the catalog JSON encoder on the way in, so enums
    such as ``CatalogKind`` and pydantic schemas are stored by value.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return to_jsonable(value)
        return dumps(value, ensure_ascii=False)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return loads(value)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)


class UUIDMixin:
    """String UUID primary key; business codes live in their own columns."""

    id = Column(String(36), primary_key=True, default=new_id)
