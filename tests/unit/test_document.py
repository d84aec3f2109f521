"""Unit tests for value coercion."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import UUID

import pytest
from bson import Decimal128, ObjectId

from orm_adapter_mongo import DocumentError
from orm_adapter_mongo.document import coerce_document, coerce_value
from orm_adapter_mongo.schema import normalize_definition

OID = "507f1f77bcf86cd799439011"


@pytest.fixture
def schema():
    schema, _ = normalize_definition(
        {
            "identity": "Order",
            "definition": {
                "id": {"type": "integer", "primaryKey": True},
                "owner": {"type": "integer", "foreignKey": True},
                "placed_at": {"type": "datetime"},
                "total": {"type": "float"},
                "meta": {"type": "json"},
            },
        }
    )
    return schema


def test_primary_key_moves_to_native_id(schema) -> None:
    doc = coerce_document({"id": OID, "total": 1}, schema)
    assert doc == {"_id": ObjectId(OID), "total": 1}


def test_none_primary_key_is_dropped(schema) -> None:
    assert coerce_document({"id": None, "total": 1}, schema) == {"total": 1}
    assert coerce_document({"_id": None, "total": 1}, schema) == {"total": 1}


def test_existing_native_id_is_converted(schema) -> None:
    assert coerce_document({"_id": OID}, schema) == {"_id": ObjectId(OID)}


def test_foreign_key_hex_becomes_object_id(schema) -> None:
    doc = coerce_document({"owner": OID}, schema)
    assert doc["owner"] == ObjectId(OID)


def test_foreign_key_non_hex_is_kept(schema) -> None:
    assert coerce_document({"owner": "someone"}, schema)["owner"] == "someone"


def test_iso_datetime_strings_are_parsed(schema) -> None:
    doc = coerce_document({"placed_at": "2025-01-01T12:00:00Z"}, schema)
    assert doc["placed_at"] == datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_invalid_datetime_string_fails(schema) -> None:
    with pytest.raises(DocumentError, match="placed_at"):
        coerce_document({"placed_at": "yesterday"}, schema)


def test_bson_unsafe_values_are_serialized(schema) -> None:
    doc = coerce_document(
        {
            "total": Decimal("10.50"),
            "meta": {
                "ref": UUID("12345678-1234-5678-1234-567812345678"),
                "days": (date(2025, 1, 2),),
            },
        },
        schema,
    )
    assert doc["total"] == Decimal128("10.50")
    assert doc["meta"] == {
        "ref": "12345678-1234-5678-1234-567812345678",
        "days": [datetime(2025, 1, 2)],
    }


def test_unknown_fields_pass_through(schema) -> None:
    assert coerce_document({"note": "hi"}, schema) == {"note": "hi"}


def test_caller_values_are_not_mutated(schema) -> None:
    values = {"id": OID, "owner": OID}
    coerce_document(values, schema)
    assert values == {"id": OID, "owner": OID}


def test_values_must_be_a_mapping(schema) -> None:
    with pytest.raises(DocumentError):
        coerce_document([("total", 1)], schema)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("field_type", "value", "expected"),
    [
        ("objectid", OID, ObjectId(OID)),
        ("datetime", "2025-01-01T00:00:00", datetime(2025, 1, 1)),
        ("date", date(2025, 1, 1), datetime(2025, 1, 1)),
        ("float", Decimal("2.5"), Decimal128("2.5")),
        (None, "plain", "plain"),
        ("datetime", None, None),
    ],
)
def test_coerce_value_by_field_type(field_type, value, expected) -> None:
    assert coerce_value("f", value, field_type) == expected
