"""Comparison modifiers -> MongoDB field operators."""

from __future__ import annotations

from typing import Any

_MONGO_OP_MAP: dict[str, str] = {
    "<": "$lt",
    "lessThan": "$lt",
    "<=": "$lte",
    "lessThanOrEqual": "$lte",
    ">": "$gt",
    "greaterThan": "$gt",
    ">=": "$gte",
    "greaterThanOrEqual": "$gte",
    "!": "$ne",
    "not": "$ne",
    "in": "$in",
    "nin": "$nin",
}

COMPARISON_MODIFIERS = frozenset(_MONGO_OP_MAP)


def compile_comparison(modifier: str, val: Any) -> dict[str, Any] | None:
    """Compile a comparison modifier. Returns None if not a comparison."""
    mongo_op = _MONGO_OP_MAP.get(modifier)
    if mongo_op is None:
        return None
    if mongo_op == "$ne" and isinstance(val, (list, tuple)):
        return {"$nin": list(val)}
    if mongo_op in {"$in", "$nin"}:
        return {mongo_op: list(val) if isinstance(val, (list, tuple)) else [val]}
    return {mongo_op: val}
