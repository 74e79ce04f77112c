"""
Shared document helpers for the memory stores.

Every store function goes through these helpers so that writes are stamped
the same way and reads come back in the same shape.
"""
import logging
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone

from memory_backend.database import get_database

logger = logging.getLogger(__name__)

# Fields owned by the store, never taken from a client payload
RESERVED_FIELDS = ("_id", "user_id", "userUUID")

DB_UNAVAILABLE = "Database not available"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def clean_payload(data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop store-owned fields from a client payload."""
    return {k: v for k, v in (data or {}).items() if k not in RESERVED_FIELDS}


def serialize_record(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored document into the `{"id": ..., **payload}` wire shape."""
    payload = {k: v for k, v in doc.items() if k not in ("_id", "user_id")}
    return {"id": str(doc["_id"]), **payload}


async def insert_record(
    collection: str,
    user_id: str,
    data: Optional[Dict[str, Any]],
    label: str,
    **scope: Any
) -> Dict[str, Any]:
    """
    Append a timestamped record to a user-partitioned collection.

    Args:
        collection: Target collection name
        user_id: Partition key
        data: Client payload (reserved fields are dropped)
        label: Human-readable record kind for log lines
        **scope: Extra fields stamped onto the record (e.g. sessionId)

    Returns:
        {"success": True, "id": str} or {"success": False, "error": str}
    """
    try:
        db = get_database()
        if db is None:
            logger.warning(f"Memory store: Database not available, {label} not stored")
            return {"success": False, "error": DB_UNAVAILABLE}

        payload = clean_payload(data)
        now = utc_now_iso()
        record = {
            **payload,
            **scope,
            "user_id": str(user_id),
            "timestamp": payload.get("timestamp") or now,
            "createdAt": now,
        }

        result = await db[collection].insert_one(record)
        inserted_id = str(result.inserted_id)
        logger.info(f"Memory store: {label} stored user={user_id} id={inserted_id}")
        return {"success": True, "id": inserted_id}

    except Exception as e:
        logger.error(f"Memory store: Error storing {label}: {str(e)}", exc_info=True)
        return {"success": False, "error": str(e)}


async def query_recent(
    collection: str,
    query: Dict[str, Any],
    limit: int,
    label: str
) -> List[Dict[str, Any]]:
    """
    Fetch records matching `query`, most recent first.

    Returns an empty list when the database is unavailable or the query fails.
    """
    try:
        db = get_database()
        if db is None:
            logger.warning(f"Memory store: Database not available, no {label} returned")
            return []

        cursor = db[collection].find(query).sort(
            [("timestamp", -1), ("_id", -1)]
        ).limit(max(int(limit), 1))

        records = []
        async for doc in cursor:
            records.append(serialize_record(doc))

        logger.debug(f"Memory store: Retrieved {len(records)} {label} for query={query}")
        return records

    except Exception as e:
        logger.error(f"Memory store: Error getting {label}: {str(e)}", exc_info=True)
        return []
