"""Abstract criteria -> MongoDB query descriptor.

Criteria are plain mappings::

    {
        "where": {"age": {">=": 18}, "or": [{"name": "a"}, {"name": "b"}]},
        "sort": {"name": "asc"},
        "limit": 10,
        "skip": 20,
        "select": ["name", "email"],
    }

or, for grouped queries::

    {"where": {...}, "groupBy": ["status"], "sum": ["amount"]}

Parsing never raises: :meth:`CriteriaParser.parse` returns a
:class:`ParseResult` carrying either the query or the ``CriteriaError``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .config import DEFAULT_CONFIG, AdapterConfig
from .document import coerce_value
from .exceptions import CriteriaError, DocumentError
from .operators import (
    COMPARISON_MODIFIERS,
    MODIFIERS,
    compile_comparison,
    compile_pattern,
)

if TYPE_CHECKING:
    from .schema import CollectionSchema

logger = logging.getLogger(__name__)

_AGGREGATORS: dict[str, str] = {
    "sum": "$sum",
    "average": "$avg",
    "min": "$min",
    "max": "$max",
}
_MODIFIER_KEYS = ("limit", "skip", "sort", "select", "groupBy")
CRITERIA_KEYS = ("where", *_MODIFIER_KEYS, *_AGGREGATORS)
_LOGICAL_KEYS = {"or": "$or", "and": "$and"}


@dataclass(frozen=True)
class QueryDescriptor:
    """Native query pieces for one operation.

    ``criteria`` holds ``where`` plus any of ``sort``, ``limit``, ``skip``.
    ``aggregate_group`` is a ``$group`` body and is only set when
    ``aggregate`` is true.
    """

    criteria: dict[str, Any] = field(default_factory=dict)
    projection: dict[str, int] | None = None
    aggregate: bool = False
    aggregate_group: dict[str, Any] | None = None

    @property
    def where(self) -> dict[str, Any]:
        return self.criteria.get("where") or {}

    @property
    def find_options(self) -> dict[str, Any]:
        """Non-``where`` criteria merged with the projection, as find() kwargs."""
        options = {k: v for k, v in self.criteria.items() if k != "where"}
        if self.projection:
            options["projection"] = self.projection
        return options


@dataclass(frozen=True)
class ParseResult:
    query: QueryDescriptor | None = None
    error: CriteriaError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> QueryDescriptor:
        """Return the query or raise the parse error."""
        if self.error is not None:
            raise self.error
        assert self.query is not None
        return self.query


class CriteriaParser:
    """Translates abstract criteria against a normalized schema."""

    def __init__(self, config: AdapterConfig = DEFAULT_CONFIG) -> None:
        self._config = config

    def parse(
        self,
        criteria: Mapping[str, Any] | None,
        schema: CollectionSchema,
        primary_key: str = "id",
    ) -> ParseResult:
        try:
            query = self._build(criteria, schema, primary_key)
        except CriteriaError as e:
            logger.debug("Rejected criteria %r: %s", criteria, e)
            return ParseResult(error=e)
        return ParseResult(query=query)

    def _build(
        self,
        criteria: Mapping[str, Any] | None,
        schema: CollectionSchema,
        primary_key: str,
    ) -> QueryDescriptor:
        if criteria is None:
            return QueryDescriptor(criteria={"where": {}})
        if not isinstance(criteria, Mapping):
            raise CriteriaError(
                f"Criteria must be a mapping, got {type(criteria).__name__}"
            )
        for key in criteria:
            if key not in CRITERIA_KEYS:
                raise CriteriaError(
                    f"Unknown criteria key: {key!r}.",
                    token=str(key),
                    valid_tokens=list(CRITERIA_KEYS),
                )

        where = criteria.get("where")
        if where is not None and not isinstance(where, Mapping):
            raise CriteriaError("'where' must be a mapping")
        native: dict[str, Any] = {
            "where": self._compile_where(where or {}, schema, primary_key)
        }

        if any(key in criteria for key in _AGGREGATORS):
            ignored = [k for k in ("limit", "skip", "sort", "select") if k in criteria]
            if ignored:
                logger.debug("Aggregate query ignores %s", ", ".join(ignored))
            return QueryDescriptor(
                criteria=native,
                aggregate=True,
                aggregate_group=self._build_group(criteria),
            )
        if "groupBy" in criteria:
            raise CriteriaError(
                "groupBy requires at least one of: " + ", ".join(_AGGREGATORS)
            )

        for key in ("limit", "skip"):
            if criteria.get(key) is not None:
                native[key] = self._non_negative(key, criteria[key])
        if criteria.get("sort"):
            native["sort"] = self._build_sort(criteria["sort"], primary_key)
        projection = self._build_projection(criteria.get("select"), primary_key)
        return QueryDescriptor(criteria=native, projection=projection)

    # -- where -----------------------------------------------------------

    def _compile_where(
        self, where: Mapping[str, Any], schema: CollectionSchema, primary_key: str
    ) -> dict[str, Any]:
        compiled: dict[str, Any] = {}
        for key, value in where.items():
            if key in _LOGICAL_KEYS:
                if not isinstance(value, list):
                    raise CriteriaError(f"{key!r} requires a list of clauses")
                compiled[_LOGICAL_KEYS[key]] = [
                    self._compile_clause(clause, schema, primary_key)
                    for clause in value
                ]
                continue
            is_id = key in (primary_key, "id", "_id")
            if is_id:
                if "_id" in compiled:
                    raise CriteriaError(
                        f"Identifier given more than once in where: {key!r}",
                        token=str(key),
                    )
                field_name, field_type = "_id", self._config.native_id_type
            else:
                descriptor = schema.get(key)
                field_name = key
                field_type = descriptor.type if descriptor is not None else None
            compiled[field_name] = self._compile_value(key, value, field_type)
        return compiled

    def _compile_clause(
        self, clause: Any, schema: CollectionSchema, primary_key: str
    ) -> dict[str, Any]:
        if not isinstance(clause, Mapping):
            raise CriteriaError("Logical clauses must be mappings")
        return self._compile_where(clause, schema, primary_key)

    def _compile_value(self, key: str, value: Any, field_type: str | None) -> Any:
        def native(v: Any) -> Any:
            if isinstance(v, (list, tuple)):
                return [native(i) for i in v]
            try:
                return coerce_value(
                    key, v, field_type, native_id_type=self._config.native_id_type
                )
            except DocumentError as e:
                raise CriteriaError(str(e), token=key) from e

        if isinstance(value, (list, tuple)):
            return {"$in": native(list(value))}
        if not isinstance(value, Mapping):
            return native(value)

        compiled: dict[str, Any] = {}
        for modifier, operand in value.items():
            if modifier in COMPARISON_MODIFIERS:
                fragment = compile_comparison(modifier, native(operand))
            else:
                fragment = compile_pattern(
                    modifier, operand, case_insensitive=self._config.case_insensitive
                )
            if fragment is None:
                raise CriteriaError(
                    f"Unknown modifier {modifier!r} on field {key!r}.",
                    token=str(modifier),
                    valid_tokens=sorted(MODIFIERS),
                )
            compiled.update(fragment)
        return compiled

    # -- modifiers -------------------------------------------------------

    @staticmethod
    def _non_negative(key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise CriteriaError(f"{key!r} must be a non-negative integer")
        return value

    @staticmethod
    def _build_sort(sort: Any, primary_key: str) -> list[tuple[str, int]]:
        if isinstance(sort, str):
            parts = sort.split()
            if len(parts) not in (1, 2):
                raise CriteriaError(f"Invalid sort expression: {sort!r}")
            sort = {parts[0]: parts[1] if len(parts) == 2 else "asc"}
        if not isinstance(sort, Mapping):
            raise CriteriaError("'sort' must be a mapping or a string")
        result: list[tuple[str, int]] = []
        for field_name, direction in sort.items():
            if isinstance(direction, str):
                direction = direction.lower()
            if direction in (1, "asc"):
                value = 1
            elif direction in (-1, "desc"):
                value = -1
            else:
                raise CriteriaError(
                    f"Invalid sort direction {direction!r} for {field_name!r}"
                )
            key = "_id" if field_name in (primary_key, "id") else field_name
            result.append((key, value))
        return result

    @staticmethod
    def _build_projection(select: Any, primary_key: str) -> dict[str, int] | None:
        if not select:
            return None
        if isinstance(select, str) or not isinstance(select, (list, tuple)):
            raise CriteriaError("'select' must be a list of field names")
        return {
            "_id" if name in (primary_key, "id") else name: 1 for name in select
        }

    @staticmethod
    def _as_fields(key: str, value: Any) -> list[str]:
        fields = [value] if isinstance(value, str) else value
        if not isinstance(fields, (list, tuple)) or not all(
            isinstance(f, str) for f in fields
        ):
            raise CriteriaError(f"{key!r} must be a field name or a list of names")
        return list(fields)

    def _build_group(self, criteria: Mapping[str, Any]) -> dict[str, Any]:
        group_by = criteria.get("groupBy")
        group: dict[str, Any] = {
            "_id": {f: f"${f}" for f in self._as_fields("groupBy", group_by)}
            if group_by
            else None
        }
        for key, mongo_op in _AGGREGATORS.items():
            if key in criteria:
                for f in self._as_fields(key, criteria[key]):
                    group[f] = {mongo_op: f"${f}"}
        return group
