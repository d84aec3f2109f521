"""Motor client lifecycle and per-identity store access."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import MongoConnectionError

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection


class MongoConnectionManager:
    """Wrap a Motor client and hand out collections keyed by identity.

    The manager is owned by the caller and may be shared by any number of
    collection adapters; adapters never connect or close it.
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._connect_timeout_ms = connect_timeout_ms
        self._kwargs = kwargs
        self._client: AsyncIOMotorClient[Any] | None = None

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create and cache the Motor client. Idempotent."""
        if self._client is not None:
            return self._client
        from motor.motor_asyncio import AsyncIOMotorClient

        try:
            self._client = AsyncIOMotorClient(
                self._url,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                connectTimeoutMS=self._connect_timeout_ms,
                **self._kwargs,
            )
            return self._client
        except Exception as e:
            raise MongoConnectionError(str(e)) from e

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        """Return the Motor client; raises if not connected."""
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    @property
    def database(self) -> str:
        if not self._database:
            raise MongoConnectionError("Database name must be set on the connection")
        return self._database

    def collection(self, identity: str) -> AsyncIOMotorCollection[Any]:
        """Return the native collection handle for ``identity``."""
        return self.client.get_database(self.database).get_collection(identity)

    def close(self) -> None:
        """Close the client (synchronous; Motor client.close() is sync)."""
        if self._client is not None:
            self._client.close()
            self._client = None

    async def health_check(self) -> bool:
        """Ping the server; return True if reachable."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except Exception:  # noqa: BLE001
            return False
