"""Tests for JSON helpers."""

import json
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from catalog_core.enums import CatalogKind
from catalog_core.schemas.catalog_schema import CatalogItemRead
from catalog_core.utils.json_utils import dumps, loads, to_jsonable


class TestJsonUtils:
    def test_dumps_handles_rich_types(self):
        item_id = uuid.uuid4()
        payload = {
            "amount": Decimal("12.50"),
            "when": datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc),
            "day": date(2024, 5, 1),
            "id": item_id,
            "kind": CatalogKind.AMENITY,
            "codes": {"b", "a"},
        }

        decoded = json.loads(dumps(payload))

        assert decoded == {
            "amount": 12.5,
            "when": "2024-05-01T10:30:00+00:00",
            "day": "2024-05-01",
            "id": str(item_id),
            "kind": "amenity",
            "codes": ["a", "b"],
        }

    def test_pydantic_models_serialize_with_computed_origin(self):
        item = CatalogItemRead(id="1", code="wifi", name="Wifi", kind=CatalogKind.CONTACT_TYPE)

        decoded = to_jsonable({"item": item})

        assert decoded["item"]["origin"] == "global"
        assert decoded["item"]["kind"] == "contact_type"

    def test_loads(self):
        assert loads('{"a": [1, 2]}') == {"a": [1, 2]}
