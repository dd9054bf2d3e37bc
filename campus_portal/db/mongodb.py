"""
MongoDB Connection Utility

MongoDB holds every portal record:
- users: profiles for all six roles, keyed by uid
- accounts: identity provider credentials
- companies: placement drives with applicant / opt-out sets
- trainings: training programs with participant sets
- placement_records: denormalized placement ledger
- revoked_tokens: signed-out JWT ids
"""
import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from campus_portal.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        settings = get_settings()
        timeout = settings.request_timeout_ms
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=timeout,
            connectTimeoutMS=timeout,
            socketTimeoutMS=timeout,
        )
    return _client


def get_mongo_db() -> Database:
    """Get the portal database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def reset_mongo_client(client: MongoClient = None) -> None:
    """Replace (or drop) the cached client. The next call reconnects."""
    global _client, _db
    _client = client
    _db = None


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
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "accounts": "accounts",
    "companies": "companies",
    "trainings": "trainings",
    "placement_records": "placement_records",
    "revoked_tokens": "revoked_tokens",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # One account per e-mail; the identity provider relies on this
    db[COLLECTIONS["accounts"]].create_index("email", unique=True)

    db[COLLECTIONS["users"]].create_index([("role", ASCENDING), ("department", ASCENDING)])
    db[COLLECTIONS["users"]].create_index("roll_no")

    db[COLLECTIONS["placement_records"]].create_index("roll_no")
    db[COLLECTIONS["placement_records"]].create_index([("created_at", DESCENDING)])

    db[COLLECTIONS["revoked_tokens"]].create_index("jti", unique=True)

    logger.info("MongoDB indexes created successfully")
