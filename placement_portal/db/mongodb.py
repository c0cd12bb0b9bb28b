"""
MongoDB Connection Utility

MongoDB stores:
- Uploaded documents (resumes, company logos, announcement attachments)

The relational store only keeps the URL returned for each upload.
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from placement_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=3000)
    return _client


def get_mongo_db() -> Database:
    """Get the uploads database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    db = get_mongo_db()
    return db[name]


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


# Collection name constants (avoid typos)
COLLECTIONS = {
    "uploaded_files": "uploaded_files",
}


def init_mongo_indexes():
    """
    Create indexes for upload lookups.
    Call this once during app startup.
    """
    db = get_mongo_db()
    db[COLLECTIONS["uploaded_files"]].create_index("owner_user_id")
    db[COLLECTIONS["uploaded_files"]].create_index([("kind", 1), ("uploaded_at", -1)])
