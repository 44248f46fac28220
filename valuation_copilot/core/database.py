import logging
import time
from typing import Optional, Dict

import pymongo
from pymongo import MongoClient

from .config import MONGO_URI, DB_NAME, DEALS_COLLECTION

logger = logging.getLogger(__name__)


class DatabaseConnection:
    _instance = None
    _client = None
    _db = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(DatabaseConnection, cls).__new__(cls)
        return cls._instance

    def __init__(self, uri: Optional[str] = None, db_name: str = DB_NAME):
        self.uri = uri or MONGO_URI
        self.db_name = db_name
        if not self._client:
            self._initialize_connection()

    def _initialize_connection(self, max_retries: int = 3) -> None:
        """Initialize MongoDB connection with retry logic."""
        if not self.uri:
            raise ConnectionError("MONGO_URI is not configured")
        for attempt in range(max_retries):
            try:
                client = MongoClient(self.uri)
                client.admin.command('ping')
                DatabaseConnection._client = client
                DatabaseConnection._db = client[self.db_name]
                logger.info("MongoDB connection successful.")
                return
            except pymongo.errors.ConnectionFailure as e:
                logger.warning("MongoDB connection attempt %d failed: %s", attempt + 1, e)
                if attempt < max_retries - 1:
                    time.sleep(2 ** attempt)  # Exponential backoff
        raise ConnectionError("Failed to connect to MongoDB after multiple retries")

    @property
    def db(self):
        """Get the database instance."""
        if not self._client:
            self._initialize_connection()
        return self._db

    def get_collection(self, collection_name: str):
        """Get a specific collection."""
        return self.db[collection_name]

    def close(self):
        """Close the database connection."""
        if self._client:
            self._client.close()
            DatabaseConnection._client = None
            DatabaseConnection._db = None


class KeyValueStore:
    """Opaque string key/value storage used for saved deals."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key):
        return key in self._data

    def __len__(self):
        return len(self._data)


class MongoKeyValueStore(KeyValueStore):
    """Stores each key as one document: {"_id": key, "value": value}."""

    def __init__(self, collection):
        self.collection = collection

    @classmethod
    def from_connection(cls, connection: DatabaseConnection, collection_name: str = DEALS_COLLECTION):
        return cls(connection.get_collection(collection_name))

    def get(self, key: str) -> Optional[str]:
        document = self.collection.find_one({"_id": key})
        if document is None:
            return None
        return document.get("value")

    def set(self, key: str, value: str) -> None:
        self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)


def get_deal_store() -> KeyValueStore:
    """MongoDB-backed store when MONGO_URI is set and reachable, otherwise in-memory."""
    if not MONGO_URI:
        logger.info("MONGO_URI not set; saved deals are kept in memory only.")
        return InMemoryKeyValueStore()
    try:
        return MongoKeyValueStore.from_connection(DatabaseConnection())
    except ConnectionError as e:
        logger.error("Falling back to in-memory deal store: %s", e)
        return InMemoryKeyValueStore()
