"""Secondary index planning from schema metadata, plus the apply step."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .collection import Collection
    from .schema import CollectionSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSpec:
    """A single-field sparse index derived from a schema field.

    ``index`` and ``options["name"]`` use the namespaced key (identity
    followed by the field name) so names stay unique in a shared index
    namespace. Direction is always ascending.
    """

    field: str
    index: dict[str, int]
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.options["name"])

    @property
    def unique(self) -> bool:
        return bool(self.options.get("unique", False))


def plan_indexes(
    schema: CollectionSchema, identity: str, primary_key: str = "id"
) -> tuple[IndexSpec, ...]:
    """Derive index specs in schema field order.

    The primary key is skipped (the store indexes ``_id`` itself). A field
    flagged both ``unique`` and ``index`` yields only the unique spec.
    """
    specs: list[IndexSpec] = []
    for key, descriptor in schema.items():
        if key == primary_key:
            continue
        if not (descriptor.unique or descriptor.index):
            continue
        namespaced = identity + key
        options: dict[str, Any] = {"sparse": True}
        if descriptor.unique:
            options["unique"] = True
        options["name"] = namespaced
        specs.append(IndexSpec(field=key, index={namespaced: 1}, options=options))
    return tuple(specs)


async def ensure_indexes(collection: Collection) -> list[str]:
    """Create every planned index of ``collection`` on the store.

    Returns the index names reported by the store.
    """
    coll = collection.connection.collection(collection.identity)
    names: list[str] = []
    for spec in collection.indexes:
        name = await coll.create_index([(spec.field, 1)], **spec.options)
        logger.debug("Ensured index %s on %s.%s", name, collection.identity, spec.field)
        names.append(name)
    return names
