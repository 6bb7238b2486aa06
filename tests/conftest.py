"""
CRUD Gateway: Test Configuration (conftest.py)
===============================================

What:  Shared pytest fixtures for the entire test suite.
How:   Builds real `Backends` around test doubles and hands them to
       `create_app()`; no MongoDB, MySQL or AWS account is needed.

Fixture Hierarchy (all function-scoped):
    ├── settings:       Settings pointing the relational pool at a temp SQLite file
    ├── engine:         Async SQLAlchemy engine (aiosqlite), disposed after the test
    ├── users:          In-memory async stand-in for the Mongo collection
    ├── s3_client:      Real boto3 client, never reaching the network
    ├── s3_stub:        botocore Stubber wrapping s3_client
    ├── backends:       Backends bundle of the above
    ├── app:            Application created around `backends`
    └── test_client:    HTTPX AsyncClient talking to `app` over ASGI
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, Optional

import boto3
import pytest
import pytest_asyncio
from bson import ObjectId
from botocore.stub import Stubber
from httpx import ASGITransport, AsyncClient

from crudgateway.backends import Backends
from crudgateway.config import Settings
from crudgateway.database import create_engine_from_settings, create_session_factory
from crudgateway.main import create_app


# ══════════════════════════════════════════════════════════════════════════
# Document store double
# ══════════════════════════════════════════════════════════════════════════

class FakeCollection:
    """
    The subset of pymongo's AsyncCollection the gateway calls.

    Filters are exact-match on top-level keys, which is all the gateway
    ever sends ({"_id": ObjectId} or nothing).
    """

    def __init__(self):
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}

    def _matches(self, document: Dict[str, Any], filter: Optional[Dict[str, Any]]) -> bool:
        return all(document.get(k) == v for k, v in (filter or {}).items())

    async def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        self.documents[document["_id"]] = copy.deepcopy(document)
        return SimpleNamespace(inserted_id=document["_id"])

    async def find_one(self, filter: Optional[Dict[str, Any]] = None):
        for document in self.documents.values():
            if self._matches(document, filter):
                return copy.deepcopy(document)
        return None

    async def find(self, filter: Optional[Dict[str, Any]] = None):
        for document in list(self.documents.values()):
            if self._matches(document, filter):
                yield copy.deepcopy(document)

    async def find_one_and_update(self, filter, update, return_document=None):
        for document in self.documents.values():
            if self._matches(document, filter):
                document.update(update.get("$set", {}))
                return copy.deepcopy(document)
        return None

    async def delete_one(self, filter):
        for key, document in list(self.documents.items()):
            if self._matches(document, filter):
                del self.documents[key]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        db_name="mydatabase",
        region="us-east-1",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def engine(settings):
    engine = create_engine_from_settings(settings)
    yield engine
    await engine.dispose()


@pytest.fixture
def users():
    return FakeCollection()


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def s3_stub(s3_client):
    with Stubber(s3_client) as stubber:
        yield stubber


@pytest.fixture
def backends(engine, users, s3_client):
    return Backends(
        engine=engine,
        session_factory=create_session_factory(engine),
        users=users,
        s3=s3_client,
    )


@pytest.fixture
def app(settings, backends):
    return create_app(settings=settings, backends=backends)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
