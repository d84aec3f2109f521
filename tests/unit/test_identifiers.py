"""Unit tests for identifier rewriting."""

from __future__ import annotations

from bson import ObjectId

from orm_adapter_mongo.identifiers import (
    from_native_id,
    rewrite_id,
    rewrite_ids,
    to_native_id,
)
from orm_adapter_mongo.schema import normalize_definition

OID = "507f1f77bcf86cd799439011"


def test_to_native_id() -> None:
    assert to_native_id(OID) == ObjectId(OID)
    assert to_native_id("abc") == "abc"
    assert to_native_id(42) == 42


def test_from_native_id() -> None:
    assert from_native_id(ObjectId(OID)) == OID
    assert from_native_id(7) == 7


def test_rewrite_moves_id_and_stringifies() -> None:
    original = {"_id": ObjectId(OID), "name": "a"}
    doc = rewrite_id(original)
    assert doc == {"id": OID, "name": "a"}
    assert "_id" in original


def test_rewrite_keeps_non_object_ids() -> None:
    assert rewrite_id({"_id": "custom"}) == {"id": "custom"}


def test_rewrite_honours_id_field() -> None:
    assert rewrite_id({"_id": 1}, id_field="code") == {"code": 1}


def test_rewrite_stringifies_foreign_keys() -> None:
    schema, _ = normalize_definition(
        {
            "identity": "Pet",
            "definition": {
                "owner": {"type": "string", "foreignKey": True},
                "tag": {"type": "objectid"},
            },
        }
    )
    tag = ObjectId()
    docs = rewrite_ids([{"_id": ObjectId(OID), "owner": ObjectId(OID), "tag": tag}], schema)
    assert docs == [{"id": OID, "owner": OID, "tag": tag}]
