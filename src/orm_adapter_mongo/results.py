"""Native removal outcomes and their normalization to ``[{"id": ...}]``."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from functools import singledispatch
from typing import Any

from .exceptions import AdapterError
from .identifiers import from_native_id


@dataclass(frozen=True)
class Removal:
    """Outcome of a multi-document remove.

    ``ids`` are the native ids captured before the remove was issued;
    ``deleted_count`` is what the store reported.
    """

    ids: list[Any] = field(default_factory=list)
    deleted_count: int = 0


@singledispatch
def normalize_removal(outcome: Any) -> list[dict[str, Any]]:
    """Normalize a remove outcome into a list of ``{"id": ...}`` records.

    Accepts a :class:`Removal`, one removed document or ``None``, a sequence
    of documents or ids, or a removed count. Counts carry no ids, so only
    ``0`` is accepted; any other count raises :class:`AdapterError`.
    """
    raise TypeError(f"Unsupported removal outcome: {type(outcome).__name__}")


@normalize_removal.register(Removal)
def _(outcome: Removal) -> list[dict[str, Any]]:
    return [{"id": from_native_id(i)} for i in outcome.ids]


@normalize_removal.register(int)
def _(outcome: int) -> list[dict[str, Any]]:
    # A bare count names no documents; only "nothing removed" can be reported.
    if outcome == 0:
        return []
    raise AdapterError(
        f"Removal count {outcome} carries no ids; capture ids before removing"
    )


@normalize_removal.register(bool)
def _(outcome: bool) -> list[dict[str, Any]]:
    raise TypeError(f"Unsupported removal outcome: {type(outcome).__name__}")


@normalize_removal.register(type(None))
def _(outcome: None) -> list[dict[str, Any]]:
    return []


@normalize_removal.register(Mapping)
def _(outcome: Mapping) -> list[dict[str, Any]]:  # type: ignore[type-arg]
    return [{"id": from_native_id(outcome.get("_id", outcome.get("id")))}]


@normalize_removal.register(list)
@normalize_removal.register(tuple)
def _(outcome: Sequence[Any]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for item in outcome:
        if isinstance(item, Mapping):
            records.extend(normalize_removal(item))
        else:
            records.append({"id": from_native_id(item)})
    return records
