"""
Separate kinds: one dedicated table per kind.

Domain columns (``slug``, ``category``, ``is_final``, ...) are passed through
opaquely; a field is written only when the kind's table has that column.
"""

from typing import Any

from ..db.db_domain_models import DOMAIN_MODELS
from ..enums import CatalogKind, StorageStrategy
from ..exceptions import ErrorCode, ValidationError
from ..schemas.catalog_schema import DomainItemRead
from .base_store import BaseKindStore


class SeparateKindStore(BaseKindStore):
    read_schema = DomainItemRead

    def model_for(self, kind: CatalogKind) -> Any:
        try:
            return DOMAIN_MODELS[kind]
        except KeyError:
            raise ValidationError(
                f"Catalog kind '{kind.value}' has no dedicated table",
                field="kind",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                storage=StorageStrategy.SEPARATE.value,
            ) from None
