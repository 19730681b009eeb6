"""
MongoDB Connection Utility

MongoDB holds the local key-value store: one document per collection key,
the value being the whole JSON array (or scalar) for that key.

WHY MongoDB for this?
- Schema-flexible: entity shapes are not enforced
- A key maps to one self-contained document
- No joins needed: services filter in memory
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from gigconnect.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None

KV_COLLECTION = "kv_store"


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the gigconnect database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_kv_collection(db: Database = None) -> Collection:
    """Collection backing the key-value store."""
    db = db if db is not None else get_mongo_db()
    return db[KV_COLLECTION]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False
