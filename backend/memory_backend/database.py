"""
MongoDB database configuration and connection.
"""
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient

from memory_backend.config import DatabaseConfig

logger = logging.getLogger(__name__)

# Global MongoDB client
client: Optional[AsyncIOMotorClient] = None
database = None

# Collections partitioned by user_id, newest-first reads on timestamp
USER_COLLECTIONS = [
    "conversations",
    "stages",
    "user_contexts",
]

# Collections partitioned by (user_id, sessionId)
SESSION_COLLECTIONS = [
    "session_stages",
    "session_contexts",
    "session_breakthroughs",
    "session_themes",
]


async def connect_to_mongo():
    """
    Connect to MongoDB and create indexes for the memory collections.

    A failed connection is logged and leaves the database unset so the
    service can still start and report itself unhealthy.
    """
    global client, database
    try:
        client = AsyncIOMotorClient(DatabaseConfig.MONGODB_URL)
        await client.admin.command("ping")
        database = client[DatabaseConfig.DATABASE_NAME]
        logger.info(f"Connected to MongoDB: {DatabaseConfig.DATABASE_NAME}")
    except Exception as e:
        logger.error(f"MongoDB connection error: {e}", exc_info=True)
        database = None
        return

    await ensure_indexes(database)


async def ensure_indexes(db):
    """
    Create the compound indexes used by history queries.
    """
    for name in USER_COLLECTIONS:
        try:
            await db[name].create_index([("user_id", 1), ("timestamp", -1)])
        except Exception as e:
            logger.warning(f"Index creation failed for {name} (may already exist): {e}")

    for name in SESSION_COLLECTIONS:
        try:
            await db[name].create_index([("user_id", 1), ("sessionId", 1), ("timestamp", -1)])
        except Exception as e:
            logger.warning(f"Index creation failed for {name} (may already exist): {e}")

    logger.info("MongoDB indexes ensured for memory collections")


async def close_mongo_connection():
    """
    Close MongoDB connection.
    """
    global client, database
    if client:
        client.close()
        logger.info("MongoDB connection closed")
    client = None
    database = None


def get_database():
    """
    Get MongoDB database instance.
    """
    return database


def set_database(db):
    """
    Replace the active database handle (used by tests and scripts).
    """
    global database
    database = db
