"""Unit tests for MongoConnectionManager."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from orm_adapter_mongo.connection import MongoConnectionManager
from orm_adapter_mongo.exceptions import MongoConnectionError


def test_client_before_connect_raises() -> None:
    mgr = MongoConnectionManager()
    with pytest.raises(MongoConnectionError, match="Not connected"):
        _ = mgr.client


def test_collection_requires_database() -> None:
    mgr = MongoConnectionManager()
    mgr._client = MagicMock()
    with pytest.raises(MongoConnectionError, match="Database name"):
        mgr.collection("user")


def test_collection_is_keyed_by_identity() -> None:
    mgr = MongoConnectionManager(database="app")
    client = MagicMock()
    mgr._client = client

    coll = mgr.collection("user")

    client.get_database.assert_called_once_with("app")
    client.get_database.return_value.get_collection.assert_called_once_with("user")
    assert coll is client.get_database.return_value.get_collection.return_value


@pytest.mark.asyncio
async def test_connect_is_idempotent(monkeypatch) -> None:
    import motor.motor_asyncio

    created = []

    def fake_client(*args, **kwargs):
        client = MagicMock()
        created.append((args, kwargs))
        return client

    monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", fake_client)
    mgr = MongoConnectionManager(url="mongodb://db:27017", database="app")

    first = await mgr.connect()
    second = await mgr.connect()

    assert first is second
    assert len(created) == 1
    assert created[0][0] == ("mongodb://db:27017",)
    assert created[0][1]["serverSelectionTimeoutMS"] == 5000


@pytest.mark.asyncio
async def test_connect_failure_raises_connection_error(monkeypatch) -> None:
    import motor.motor_asyncio

    def broken_client(*args, **kwargs):
        raise ValueError("bad uri")

    monkeypatch.setattr(motor.motor_asyncio, "AsyncIOMotorClient", broken_client)
    mgr = MongoConnectionManager(url="nonsense")

    with pytest.raises(MongoConnectionError, match="bad uri"):
        await mgr.connect()


def test_close_resets_client() -> None:
    mgr = MongoConnectionManager()
    client = MagicMock()
    mgr._client = client

    mgr.close()
    mgr.close()

    client.close.assert_called_once()
    assert mgr._client is None


@pytest.mark.asyncio
async def test_health_check() -> None:
    mgr = MongoConnectionManager()
    assert await mgr.health_check() is False

    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    mgr._client = client
    assert await mgr.health_check() is True

    client.admin.command = AsyncMock(side_effect=RuntimeError("down"))
    assert await mgr.health_check() is False
