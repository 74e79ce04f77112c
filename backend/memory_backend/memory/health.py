"""
Storage health probe.
"""
import logging
from typing import Dict, Any

from memory_backend.database import get_database
from memory_backend.memory.records import DB_UNAVAILABLE

logger = logging.getLogger(__name__)

SERVICE_NAME = "mongodb"


async def health_check() -> Dict[str, Any]:
    """
    Ping the database.

    Returns:
        {"status": "healthy", "service": "mongodb"} or the unhealthy variant with an error
    """
    db = get_database()
    if db is None:
        return {"status": "unhealthy", "service": SERVICE_NAME, "error": DB_UNAVAILABLE}

    try:
        await db.command("ping")
        return {"status": "healthy", "service": SERVICE_NAME}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "service": SERVICE_NAME, "error": str(e)}
