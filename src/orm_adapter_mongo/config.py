"""Adapter configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AdapterConfig:
    """Settings shared by every collection built with this config.

    Attributes:
        native_id_type: Schema type tag given to primary and foreign keys the
            store identifies natively.
        default_primary_key: Primary-key field name used when no field in the
            definition is flagged ``primaryKey``.
        case_insensitive: Whether ``contains``/``startsWith``/``endsWith``/
            ``like`` criteria match case-insensitively.
    """

    native_id_type: str = "objectid"
    default_primary_key: str = "id"
    case_insensitive: bool = True


DEFAULT_CONFIG = AdapterConfig()
