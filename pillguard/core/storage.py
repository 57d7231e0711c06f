import logging
import asyncio
from datetime import datetime
from typing import Dict, Optional
from pymongo import AsyncMongoClient
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from pillguard.core.config import settings

logger = logging.getLogger(__name__)

_client = None
_store = None


MAX_RETRIES = 3
RETRY_DELAY = 2
CONNECTION_TIMEOUT = 10
MAX_POOL_SIZE = 20
MIN_POOL_SIZE = 1


class KeyValueStore:
    """Opaque string key-value store; values are JSON documents serialized by the caller."""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class MongoStore(KeyValueStore):

    def __init__(self, collection):
        self.collection = collection

    async def get(self, key: str) -> Optional[str]:
        doc = await self.collection.find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    async def set(self, key: str, value: str) -> None:
        await self.collection.update_one(
            {"_id": key},
            {"$set": {"value": value, "updated_at": datetime.utcnow()}},
            upsert=True,
        )

    async def delete(self, key: str) -> None:
        await self.collection.delete_one({"_id": key})


#------This Function opens the configured store---------
async def connect_store():
    global _client, _store

    if settings.storage_backend == "memory":
        _store = MemoryStore()
        logger.info("Using in-memory key-value store")
        return _store

    retry_count = 0
    last_error = None

    while retry_count < MAX_RETRIES:
        try:
            logger.info(f"Attempting database connection (attempt {retry_count + 1}/{MAX_RETRIES})...")

            _client = AsyncMongoClient(
                settings.mongodb_uri,
                maxPoolSize=MAX_POOL_SIZE,
                minPoolSize=MIN_POOL_SIZE,
                connectTimeoutMS=CONNECTION_TIMEOUT * 1000,
                serverSelectionTimeoutMS=CONNECTION_TIMEOUT * 1000,
                retryWrites=True,
            )

            await _client.admin.command('ping')
            logger.info("Database connection established successfully")
            break

        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            last_error = e
            retry_count += 1
            logger.warning(f"Database connection attempt {retry_count} failed: {str(e)}")

            if retry_count < MAX_RETRIES:
                await asyncio.sleep(RETRY_DELAY * retry_count)
            else:
                logger.error(f"Failed to connect to database after {MAX_RETRIES} attempts")
                raise RuntimeError(f"Failed to connect to database: {str(last_error)}")

    _store = MongoStore(_client[settings.db_name][settings.kv_collection])
    logger.info("Key-value store initialization completed")
    return _store


#------This Function closes the store---------
async def close_store():
    global _client, _store
    if _client:
        try:
            await _client.close()
            logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {str(e)}")
    _client = None
    _store = None


#------This Function returns the store instance---------
def get_store() -> KeyValueStore:
    if _store is None:
        raise RuntimeError("Store not initialized. Call connect_store() first.")
    return _store


#------This Function checks the store health status---------
async def check_store_health() -> dict:
    try:
        if _store is None:
            return {"status": "unhealthy", "error": "Store not initialized"}
        if _client is not None:
            await _client.admin.command('ping')
            return {"status": "healthy", "backend": "mongo", "database": settings.db_name}
        return {"status": "healthy", "backend": "memory"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}
