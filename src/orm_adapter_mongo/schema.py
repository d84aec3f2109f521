"""Collection definition normalization.

A raw definition looks like::

    {
        "identity": "User",
        "tableName": "users",          # optional, wins over identity
        "definition": {
            "id": {"type": "integer", "primaryKey": True, "autoIncrement": True},
            "email": {"type": "string", "unique": True},
            "team": {"type": "string", "foreignKey": True},
        },
    }

The store generates its own identifiers, so integer primary keys and foreign
keys are retyped to the native id type and ``autoIncrement`` is dropped.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import DEFAULT_CONFIG, AdapterConfig
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CollectionSchema = Mapping[str, "FieldDescriptor"]


class FieldDescriptor(BaseModel):
    """Normalized metadata for one field."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    type: str = "string"
    primary_key: bool = Field(default=False, alias="primaryKey")
    unique: bool = False
    index: bool = False
    foreign_key: bool = Field(default=False, alias="foreignKey")


def _derive_identity(definition: Mapping[str, Any]) -> str:
    table_name = definition.get("tableName")
    if table_name:
        if not isinstance(table_name, str):
            raise ConfigurationError("tableName must be a string")
        return table_name
    identity = definition.get("identity")
    if not identity or not isinstance(identity, str):
        raise ConfigurationError(
            "Collection definition needs a tableName or an identity"
        )
    return identity.lower()


def normalize_definition(
    raw: Mapping[str, Any],
    config: AdapterConfig = DEFAULT_CONFIG,
) -> tuple[CollectionSchema, str]:
    """Return ``(schema, identity)`` for a raw collection definition.

    The raw definition is deep-copied first; the caller's object is never
    mutated and may be reused for other collections.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Collection definition must be a mapping")
    definition = copy.deepcopy(dict(raw))
    fields = definition.get("definition")
    if not isinstance(fields, Mapping):
        raise ConfigurationError("Collection definition is missing 'definition'")

    identity = _derive_identity(definition)

    attributes: dict[str, dict[str, Any]] = {}
    for name, attrs in fields.items():
        if not isinstance(attrs, Mapping):
            raise ConfigurationError(f"Field {name!r} must be described by a mapping")
        attributes[name] = dict(attrs)

    for attrs in attributes.values():
        if attrs.get("primaryKey") and attrs.get("type") == "integer":
            attrs["type"] = config.native_id_type
    for attrs in attributes.values():
        attrs.pop("autoIncrement", None)
    for attrs in attributes.values():
        if attrs.get("foreignKey"):
            attrs["type"] = config.native_id_type

    try:
        schema = {
            name: FieldDescriptor.model_validate(attrs)
            for name, attrs in attributes.items()
        }
    except ValidationError as e:
        raise ConfigurationError(f"Invalid field descriptor in {identity!r}: {e}") from e

    logger.debug("Normalized definition for %r with %d field(s)", identity, len(schema))
    return MappingProxyType(schema), identity


def resolve_primary_key(
    schema: CollectionSchema, config: AdapterConfig = DEFAULT_CONFIG
) -> str:
    """Name of the primary-key field.

    Falls back to ``config.default_primary_key`` when nothing is flagged.
    Composite keys are not supported.
    """
    flagged = [name for name, field in schema.items() if field.primary_key]
    if len(flagged) > 1:
        raise ConfigurationError(
            f"Composite primary keys are not supported: {', '.join(flagged)}"
        )
    return flagged[0] if flagged else config.default_primary_key
