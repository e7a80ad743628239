from __future__ import annotations

import logging
from typing import Protocol

from pymongo import AsyncMongoClient

from app.core.config import Settings

logger = logging.getLogger(__name__)


class Database(Protocol):
    async def ping(self) -> None: ...

    async def close(self) -> None: ...


def create_mongo_client(settings: Settings) -> AsyncMongoClient:
    return AsyncMongoClient(
        settings.mongodb_uri,
        maxPoolSize=10,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        socketTimeoutMS=45_000,
        appname="weather-gateway",
    )


class MongoDatabase:
    """The process-wide MongoDB connection pool.

    The driver reconnects on its own after a dropped connection, so the only
    thing kept here is the client handle.
    """

    def __init__(self, client: AsyncMongoClient) -> None:
        self._client = client

    async def ping(self) -> None:
        await self._client.admin.command("ping")

    async def close(self) -> None:
        await self._client.close()
        logger.info("MongoDB client closed")
