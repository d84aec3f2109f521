"""MongoDB collection adapter for storage-agnostic collection definitions.

Normalizes collection schemas, plans secondary indexes and translates
abstract find/insert/update/destroy/count criteria into MongoDB operations.
"""

from __future__ import annotations

from .collection import Collection
from .config import AdapterConfig
from .connection import MongoConnectionManager
from .criteria import CriteriaParser, ParseResult, QueryDescriptor
from .document import coerce_document
from .exceptions import (
    AdapterError,
    ConfigurationError,
    CriteriaError,
    DocumentError,
    MongoConnectionError,
    NotFoundError,
    RefetchError,
    StoreError,
)
from .identifiers import rewrite_ids, to_native_id
from .indexes import IndexSpec, ensure_indexes, plan_indexes
from .results import Removal, normalize_removal
from .schema import FieldDescriptor, normalize_definition, resolve_primary_key

__all__ = [
    # Core
    "Collection",
    "MongoConnectionManager",
    "AdapterConfig",
    # Schema and indexes
    "FieldDescriptor",
    "normalize_definition",
    "resolve_primary_key",
    "IndexSpec",
    "plan_indexes",
    "ensure_indexes",
    # Translation
    "CriteriaParser",
    "ParseResult",
    "QueryDescriptor",
    "coerce_document",
    "rewrite_ids",
    "to_native_id",
    "Removal",
    "normalize_removal",
    # Exceptions
    "AdapterError",
    "ConfigurationError",
    "CriteriaError",
    "DocumentError",
    "MongoConnectionError",
    "NotFoundError",
    "RefetchError",
    "StoreError",
]
