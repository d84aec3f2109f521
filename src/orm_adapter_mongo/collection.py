"""Collection adapter: abstract CRUD calls -> MongoDB operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pymongo.errors import PyMongoError

from .config import DEFAULT_CONFIG, AdapterConfig
from .criteria import CriteriaParser, QueryDescriptor
from .document import coerce_document
from .exceptions import NotFoundError, RefetchError
from .identifiers import rewrite_ids
from .indexes import plan_indexes
from .results import Removal, normalize_removal
from .schema import normalize_definition, resolve_primary_key

if TYPE_CHECKING:
    from .connection import MongoConnectionManager
    from .schema import CollectionSchema

logger = logging.getLogger(__name__)


class Collection:
    """One logical collection bound to a shared connection.

    ``identity``, ``schema`` and ``indexes`` are computed once at
    construction and never change. Operations keep no per-call state on the
    instance, so they can run concurrently; they are not serialized against
    each other at the data level.
    """

    def __init__(
        self,
        definition: Mapping[str, Any],
        connection: MongoConnectionManager,
        *,
        config: AdapterConfig | None = None,
        parser: CriteriaParser | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._parser = parser or CriteriaParser(self._config)
        self.connection = connection
        schema, identity = normalize_definition(definition, self._config)
        self.schema: CollectionSchema = schema
        self.identity: str = identity
        self.primary_key: str = resolve_primary_key(schema, self._config)
        self.indexes = plan_indexes(schema, identity, self.primary_key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(identity={self.identity!r})"

    def _collection(self) -> Any:
        return self.connection.collection(self.identity)

    def _query(self, criteria: Mapping[str, Any] | None) -> QueryDescriptor:
        return self._parser.parse(criteria, self.schema, self.primary_key).unwrap()

    def _rewrite(self, documents: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        return rewrite_ids(documents, self.schema, id_field=self.primary_key)

    def _log_ignored(self, operation: str, query: QueryDescriptor) -> None:
        ignored = [
            "select" if key == "projection" else key for key in query.find_options
        ]
        if query.aggregate:
            ignored.append("aggregation")
        if ignored:
            logger.debug(
                "%s on %s ignores %s", operation, self.identity, ", ".join(ignored)
            )

    def _coerce(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return coerce_document(
            values,
            self.schema,
            self.primary_key,
            native_id_type=self._config.native_id_type,
        )

    # -- find ------------------------------------------------------------

    async def find(self, criteria: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Return the documents matching ``criteria``.

        Grouped criteria run as a ``$match``/``$group`` aggregation and
        yield one record per group, with the group key fields at top level.
        """
        query = self._query(criteria)
        coll = self._collection()

        if query.aggregate:
            pipeline = [
                {"$match": query.where},
                {"$group": query.aggregate_group},
            ]
            logger.debug("Aggregating %s: %r", self.identity, pipeline)
            return [_promote_group_key(doc) async for doc in coll.aggregate(pipeline)]

        logger.debug("Finding in %s: %r %r", self.identity, query.where, query.find_options)
        cursor = coll.find(query.where, **query.find_options)
        return self._rewrite([doc async for doc in cursor])

    # -- insert ----------------------------------------------------------

    async def insert(
        self, values: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Insert one or many value bags; returns them rewritten, in input order."""
        bags = [values] if isinstance(values, Mapping) else list(values)
        if not bags:
            return []
        docs = [self._coerce(bag) for bag in bags]
        result = await self._collection().insert_many(docs)
        for doc, inserted_id in zip(docs, result.inserted_ids):
            doc["_id"] = inserted_id
        logger.debug("Inserted %d document(s) into %s", len(docs), self.identity)
        return self._rewrite(docs)

    # -- update ----------------------------------------------------------

    async def update(
        self, criteria: Mapping[str, Any] | None, values: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        """Set ``values`` on every document matching ``criteria``.

        Runs lookup -> capture -> apply -> refetch, strictly in order. The
        refetch goes by the captured ids, not by ``where``, because the
        update may change the very fields ``where`` filters on.

        The stages are not transactional: a document deleted between lookup
        and refetch is silently missing from the result, and concurrent
        updates on overlapping criteria can interleave.

        Raises:
            NotFoundError: the lookup stage failed.
            RefetchError: the update was applied but reading it back failed.
        """
        query = self._query(criteria)
        self._log_ignored("Update", query)
        changes = self._coerce(values)
        changes.pop("_id", None)
        changes.pop("id", None)

        coll = self._collection()
        ids = await self._lookup(coll, query.where)
        if not ids:
            logger.debug("Update on %s matched no documents", self.identity)
            return []
        await self._apply(coll, query.where, changes)
        return await self._refetch(coll, ids)

    async def _lookup(self, coll: Any, where: dict[str, Any]) -> list[Any]:
        try:
            return [doc["_id"] async for doc in coll.find(where, projection={"_id": 1})]
        except PyMongoError as e:
            raise NotFoundError(
                f"Could not look up documents to update in {self.identity!r}"
            ) from e

    async def _apply(
        self, coll: Any, where: dict[str, Any], changes: dict[str, Any]
    ) -> None:
        if not changes:
            logger.debug("Update on %s has no settable values", self.identity)
            return
        result = await coll.update_many(where, {"$set": changes})
        logger.debug(
            "Updated %s: matched=%s modified=%s",
            self.identity,
            result.matched_count,
            result.modified_count,
        )

    async def _refetch(self, coll: Any, ids: list[Any]) -> list[dict[str, Any]]:
        try:
            docs = [doc async for doc in coll.find({"_id": {"$in": ids}})]
        except PyMongoError as e:
            raise RefetchError(self.identity, ids) from e
        if len(docs) < len(ids):
            logger.warning(
                "Refetch on %s returned %d of %d updated document(s)",
                self.identity,
                len(docs),
                len(ids),
            )
        return self._rewrite(docs)

    # -- destroy ---------------------------------------------------------

    async def destroy(self, criteria: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Remove matching documents; returns ``[{"id": ...}]`` records.

        ``sort``, ``skip`` and ``limit`` select which matches are removed. The
        ids are captured first and the remove targets exactly those ids.
        """
        query = self._query(criteria)
        coll = self._collection()

        options = {**query.find_options, "projection": {"_id": 1}}
        ids = [doc["_id"] async for doc in coll.find(query.where, **options)]
        if not ids:
            return normalize_removal(Removal())

        result = await coll.delete_many({"_id": {"$in": ids}})
        outcome = Removal(ids=ids, deleted_count=result.deleted_count)
        if outcome.deleted_count < len(outcome.ids):
            logger.warning(
                "Remove on %s deleted %d of %d matched document(s)",
                self.identity,
                outcome.deleted_count,
                len(outcome.ids),
            )

        removed = normalize_removal(outcome)
        logger.debug("Removed %d document(s) from %s", len(removed), self.identity)
        return removed

    # -- count -----------------------------------------------------------

    async def count(self, criteria: Mapping[str, Any] | None = None) -> int:
        query = self._query(criteria)
        self._log_ignored("Count", query)
        return await self._collection().count_documents(query.where)


def _promote_group_key(doc: dict[str, Any]) -> dict[str, Any]:
    """Lift the fields of a ``$group`` ``_id`` to top level and drop ``_id``."""
    result = dict(doc)
    group_key = result.pop("_id", None)
    if isinstance(group_key, Mapping):
        result.update(group_key)
    return result
