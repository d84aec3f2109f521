"""String pattern modifiers -> $regex, $options."""

from __future__ import annotations

import re
from typing import Any

from ..exceptions import CriteriaError

PATTERN_MODIFIERS = frozenset({"contains", "startsWith", "endsWith", "like"})


def compile_pattern(
    modifier: str, val: Any, *, case_insensitive: bool = True
) -> dict[str, Any] | None:
    """Compile a string pattern modifier. Returns None if not a pattern modifier."""
    if modifier not in PATTERN_MODIFIERS:
        return None
    if not isinstance(val, str):
        raise CriteriaError(f"Modifier {modifier!r} requires a string value")
    escaped = re.escape(val)
    if modifier == "contains":
        pattern = escaped
    elif modifier == "startsWith":
        pattern = "^" + escaped
    elif modifier == "endsWith":
        pattern = escaped + "$"
    else:
        # SQL LIKE: % = any, _ = single char
        pattern = "^" + escaped.replace("%", ".*").replace("_", ".") + "$"
    return {"$regex": pattern, "$options": "i" if case_insensitive else ""}
