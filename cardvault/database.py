"""
MongoDB Database Connector (Singleton Pattern).
"""
from pymongo import MongoClient
from pymongo.database import Database
from cardvault.config import config
from cardvault.logging import get_logger

# Initialize logger for database module
logger = get_logger("database")

_db_client: MongoClient | None = None
_database: Database | None = None


def get_db() -> Database:
    """
    Returns the MongoDB database instance (Singleton).

    Returns:
        Database: The MongoDB database object.
    """
    global _db_client, _database

    if _database is None:
        try:
            logger.info("Connecting to MongoDB", extra={"database": config.DATABASE_NAME})
            _db_client = MongoClient(config.MONGO_URI)
            _database = _db_client[config.DATABASE_NAME]
            logger.info("Successfully connected to MongoDB", extra={"database": config.DATABASE_NAME})
        except Exception:
            logger.error("Failed to connect to MongoDB", exc_info=True)
            raise

    return _database


def close_db():
    """Close the database connection."""
    global _db_client, _database

    if _db_client:
        try:
            _db_client.close()
            logger.info("Database connection closed")
        except Exception:
            logger.error("Error closing database connection", exc_info=True)
        finally:
            _db_client = None
            _database = None


def get_record_store():
    """
    Returns a MongoRecordStore bound to the shared database, with indexes ensured.
    """
    from cardvault.store.gateway import MongoRecordStore

    store = MongoRecordStore(get_db())
    store.ensure_indexes()
    return store


def get_collection_repository():
    """Returns a CollectionRepository bound to the shared database."""
    from cardvault.store.collections import CollectionRepository

    return CollectionRepository(get_db())
