"""
CRUD Gateway: Backing-Store Handles
====================================

What:  `Backends` bundles the three long-lived client handles: the SQLAlchemy
       engine (and its session factory), the Mongo client (and the users
       collection), and the S3 client.
How:   `create_backends(settings)` builds them without any network I/O; the
       relational pool and the Mongo client both connect on first use.
       The application factory stores the bundle on `app.state.backends`,
       and FastAPI dependencies resolve handles from there, so tests can
       inject fakes without patching module globals.
When:  Built once at startup (or by a test), closed once at shutdown.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from crudgateway.config import Settings
from crudgateway.database import create_engine_from_settings, create_session_factory

logger = logging.getLogger(__name__)

USERS_COLLECTION = "usuarios"
DEFAULT_MONGO_DATABASE = "test"


@dataclass
class Backends:
    """
    Client handles shared by all requests.

    Attributes:
        engine:           Async engine; its pool is the relational connection pool
        session_factory:  Produces one AsyncSession per request
        users:            Collection holding user documents
        s3:               boto3 S3 client
        mongo_client:     Owner of `users`; closed on shutdown when present
    """

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    users: Any
    s3: Any
    mongo_client: Optional[Any] = field(default=None)

    async def ping_document_store(self) -> None:
        """Round trip to MongoDB; raises PyMongoError when unreachable."""
        if self.mongo_client is None:
            await self.users.find_one()
            return
        await self.mongo_client.admin.command("ping")

    async def close(self) -> None:
        """Return every pooled connection and close the Mongo client."""
        await self.engine.dispose()
        if self.mongo_client is not None:
            try:
                await self.mongo_client.close()
            except PyMongoError as exc:
                logger.warning("Error closing MongoDB client: %s", exc)


def create_mongo_client(settings: Settings) -> AsyncMongoClient:
    # connect=False: the first operation opens the connection
    return AsyncMongoClient(
        settings.mongo_uri,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
        connect=False,
    )


def create_s3_client(settings: Settings):
    """
    S3 client for `settings.region`.

    Credentials come from boto3's default chain (environment, shared
    config, instance role); none are configured here.
    """
    return boto3.client(
        "s3",
        region_name=settings.region,
        endpoint_url=settings.s3_endpoint_url,
        config=BotoConfig(retries={"max_attempts": 1, "mode": "standard"}),
    )


def create_backends(settings: Settings) -> Backends:
    engine = create_engine_from_settings(settings)
    mongo_client = create_mongo_client(settings)
    database = mongo_client.get_default_database(default=DEFAULT_MONGO_DATABASE)
    return Backends(
        engine=engine,
        session_factory=create_session_factory(engine),
        users=database[USERS_COLLECTION],
        s3=create_s3_client(settings),
        mongo_client=mongo_client,
    )
