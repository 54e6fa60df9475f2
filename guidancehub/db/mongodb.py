"""
MongoDB Connection Utility

MongoDB stores every GuidanceHub record:
- Users and their privacy settings
- Quiz questions, assessments and user attempts
- Career paths, colleges, reviews
- Admission events, applications, historical cutoffs
- Notifications and student segments

Records reference each other by ObjectId; there are no joins, lookups
are done by the services one collection at a time.
"""
import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from guidancehub.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the guidancehub database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection. Use the COLLECTIONS table for names."""
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
    "questions": "questions",
    "assessments": "assessments",
    "user_responses": "user_responses",
    "career_paths": "career_paths",
    "colleges": "colleges",
    "reviews": "reviews",
    "admission_events": "admission_events",
    "applications": "student_applications",
    "historical_admissions": "historical_admissions",
    "notifications": "notifications",
    "segments": "student_segments",
    "user_segments": "user_segments",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["users"]].create_index("email", unique=True)

    # One attempt lookup per (user, assessment)
    db[COLLECTIONS["user_responses"]].create_index([
        ("user", ASCENDING),
        ("assessment", ASCENDING)
    ])

    # One review per user per college
    db[COLLECTIONS["reviews"]].create_index([
        ("user", ASCENDING),
        ("college", ASCENDING)
    ], unique=True)

    db[COLLECTIONS["admission_events"]].create_index([
        ("college", ASCENDING),
        ("start_date", ASCENDING)
    ])

    db[COLLECTIONS["applications"]].create_index([
        ("student", ASCENDING),
        ("college", ASCENDING)
    ])

    db[COLLECTIONS["historical_admissions"]].create_index([
        ("college", ASCENDING),
        ("program", ASCENDING),
        ("academic_year", DESCENDING)
    ])

    db[COLLECTIONS["notifications"]].create_index([
        ("user", ASCENDING),
        ("is_read", ASCENDING)
    ])
    db[COLLECTIONS["notifications"]].create_index([
        ("user", ASCENDING),
        ("delivered_at", DESCENDING)
    ])

    db[COLLECTIONS["user_segments"]].create_index([
        ("user", ASCENDING),
        ("segment", ASCENDING)
    ], unique=True)

    logger.info("MongoDB indexes created successfully")
