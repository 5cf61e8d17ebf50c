import json
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union


class CatalogJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        elif isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, uuid.UUID):
            return str(obj)
        elif isinstance(obj, Enum):
            return obj.value
        # Pydantic schemas serialize with their wire aliases
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json", by_alias=True)
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj)
        return super().default(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with Decimal, datetime, UUID and Enum support."""
    return json.dumps(obj, cls=CatalogJSONEncoder, **kwargs)


def loads(s: Union[str, bytes, bytearray], **kwargs) -> Any:
    """Standard JSON loads function."""
    return json.loads(s, **kwargs)


def to_jsonable(obj: Any) -> Any:
    """Normalize a payload to plain JSON types (what a wire round trip would yield)."""
    return loads(dumps(obj))
