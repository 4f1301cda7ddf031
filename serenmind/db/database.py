import logging
from typing import Optional

from pymongo import MongoClient, ASCENDING
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, PyMongoError

from serenmind import config

logger = logging.getLogger(__name__)

_db: Optional[Database] = None


def connect() -> Optional[Database]:
    try:
        client = MongoClient(config.MONGO_URI, serverSelectionTimeoutMS=5000)
        client.admin.command("ping")
        logger.info("Connected to MongoDB database %s", config.DB_NAME)
        return client[config.DB_NAME]
    except ConnectionFailure as e:
        logger.error("Could not connect to MongoDB: %s", e)
    except PyMongoError as e:
        logger.error("Unexpected MongoDB error: %s", e)
    return None


def set_database(db: Optional[Database]) -> None:
    global _db
    _db = db
    if db is not None:
        ensure_indexes(db)


def get_database() -> Database:
    global _db
    if _db is None:
        set_database(connect())
    if _db is None:
        raise ConnectionFailure("Database is not initialised. Check MONGO_URI.")
    return _db


def ensure_indexes(db: Database) -> None:
    db["mood_entries"].create_index([("user_id", ASCENDING), ("date", ASCENDING)])
    db["mental_metrics"].create_index([("user_id", ASCENDING), ("timestamp", ASCENDING)])
    db["sessions"].create_index("jti", unique=True)
    # MongoDB removes session rows once they expire
    db["sessions"].create_index("expires_at", expireAfterSeconds=0)
    db["users"].create_index("email", unique=True, sparse=True)


def get_user_collection():
    return get_database()["users"]


def get_session_collection():
    return get_database()["sessions"]


def get_mood_collection():
    return get_database()["mood_entries"]


def get_metrics_collection():
    return get_database()["mental_metrics"]
