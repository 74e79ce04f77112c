"""
User context persistence (free-form context payloads outside any session).
"""
from typing import List, Dict, Any

from memory_backend.memory.records import insert_record, query_recent

COLLECTION = "user_contexts"


async def store_user_context(user_id: str, context_data: Dict[str, Any]) -> Dict[str, Any]:
    """Append a context entry for a user."""
    return await insert_record(COLLECTION, user_id, context_data, label="user context")


async def get_user_context(user_id: str, limit: int = 20) -> List[Dict[str, Any]]:
    """Get a user's context entries, newest first."""
    return await query_recent(COLLECTION, {"user_id": str(user_id)}, limit, label="user contexts")
