import logging

from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import settings
from app.db.memory import InMemoryDocumentStore
from app.db.mongo import MongoDocumentStore
from app.db.store import DocumentStore

logger = logging.getLogger(__name__)


class StoreConnection:
    """Document store connection manager."""

    store: DocumentStore = None

store_connection = StoreConnection()


async def connect_store():
    """Open the configured document store."""
    if settings.STORE_BACKEND == "memory":
        store_connection.store = InMemoryDocumentStore()
        logger.info("Using in-memory document store")
        return

    client = AsyncIOMotorClient(settings.MONGODB_URI)
    store = MongoDocumentStore(client, settings.MONGODB_DB)
    await store.create_indexes()
    store_connection.store = store
    logger.info("Connected to MongoDB: %s", settings.MONGODB_DB)


async def close_store():
    """Close the document store."""
    if store_connection.store is not None:
        await store_connection.store.close()
        store_connection.store = None
        logger.info("Document store closed")


async def get_store() -> DocumentStore:
    """Return the active document store."""
    return store_connection.store
