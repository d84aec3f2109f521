"""Test configuration for the collection adapter."""

import pytest

from orm_adapter_mongo import Collection, MongoConnectionManager

pytest_plugins = ["pytest_asyncio"]


USER_DEFINITION = {
    "identity": "User",
    "definition": {
        "id": {"type": "integer", "primaryKey": True, "autoIncrement": True},
        "email": {"type": "string", "unique": True},
        "name": {"type": "string", "index": True},
        "status": {"type": "string"},
        "amount": {"type": "integer"},
        "team": {"type": "string", "foreignKey": True},
    },
}


@pytest.fixture
async def mongo_connection():
    """Create a MongoDB connection backed by mongomock."""
    # Use mongomock for unit tests to avoid real database dependency
    try:
        from mongomock_motor import AsyncMongoMockClient

        connection = MongoConnectionManager(url="mongodb://mock:27017", database="test_db")
        connection._client = AsyncMongoMockClient()

        yield connection

    except ImportError:
        pytest.skip("mongomock-motor not installed")


@pytest.fixture
def users(mongo_connection):
    """A ``user`` collection adapter over the mock connection."""
    return Collection(USER_DEFINITION, mongo_connection)
