"""Native ``_id`` <-> abstract ``id`` rewriting."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from bson import ObjectId

if TYPE_CHECKING:
    from .schema import CollectionSchema


def to_native_id(value: Any) -> Any:
    """Convert a hex string to ``ObjectId``; leave anything else unchanged."""
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


def from_native_id(value: Any) -> Any:
    """Render an ``ObjectId`` as a string; leave anything else unchanged."""
    if isinstance(value, ObjectId):
        return str(value)
    return value


def rewrite_id(
    document: Mapping[str, Any],
    schema: CollectionSchema | None = None,
    *,
    id_field: str = "id",
) -> dict[str, Any]:
    """Return a copy of ``document`` with ``_id`` moved to ``id_field``.

    Foreign-key fields holding ``ObjectId`` values are rendered as strings.
    """
    doc = dict(document)
    if "_id" in doc:
        doc[id_field] = from_native_id(doc.pop("_id"))
    if schema:
        for key, descriptor in schema.items():
            if descriptor.foreign_key and key in doc:
                doc[key] = from_native_id(doc[key])
    return doc


def rewrite_ids(
    documents: Iterable[Mapping[str, Any]],
    schema: CollectionSchema | None = None,
    *,
    id_field: str = "id",
) -> list[dict[str, Any]]:
    return [rewrite_id(doc, schema, id_field=id_field) for doc in documents]
