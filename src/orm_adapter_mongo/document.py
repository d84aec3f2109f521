"""Value bag -> storage-ready document coercion (ObjectId, datetime, Decimal, UUID)."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from bson import Decimal128

from .exceptions import DocumentError
from .identifiers import to_native_id

if TYPE_CHECKING:
    from .schema import CollectionSchema

_DATE_TYPES = frozenset({"date", "datetime"})


def _serialize_value(value: Any) -> Any:
    """Convert Python types to BSON-safe types."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, Mapping):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    return value


def _coerce_date(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise DocumentError(f"Field {key!r} is not an ISO date: {value!r}") from e


def coerce_value(
    key: str,
    value: Any,
    field_type: str | None,
    *,
    native_id_type: str = "objectid",
) -> Any:
    """Coerce one caller value for a field of ``field_type`` into its stored form."""
    if field_type is not None and value is not None:
        if field_type == native_id_type:
            value = to_native_id(value)
        elif field_type in _DATE_TYPES:
            value = _coerce_date(key, value)
    return _serialize_value(value)


def coerce_document(
    values: Mapping[str, Any],
    schema: CollectionSchema,
    primary_key: str = "id",
    *,
    native_id_type: str = "objectid",
) -> dict[str, Any]:
    """Normalize ``values`` against ``schema`` into a document ready to store.

    The primary-key value is moved to ``_id``; a missing or ``None`` key is
    left out so the store generates one.
    """
    if not isinstance(values, Mapping):
        raise DocumentError(
            f"Values must be a mapping, got {type(values).__name__}"
        )
    doc: dict[str, Any] = {}
    for key, value in values.items():
        descriptor = schema.get(key)
        doc[key] = coerce_value(
            key,
            value,
            descriptor.type if descriptor is not None else None,
            native_id_type=native_id_type,
        )

    native = doc.pop("_id", None)
    if primary_key in doc:
        native = doc.pop(primary_key)
    if native is not None:
        doc["_id"] = to_native_id(native)
    return doc
