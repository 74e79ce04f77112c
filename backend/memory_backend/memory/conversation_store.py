"""
Conversation history persistence.
"""
from typing import List, Dict, Any

from memory_backend.memory.records import insert_record, query_recent

COLLECTION = "conversations"


async def store_conversation(user_id: str, conversation_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Append a conversation entry (speaker `type`, `content`, `stage`, ...) for a user.
    """
    return await insert_record(COLLECTION, user_id, conversation_data, label="conversation")


async def get_conversation_history(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    """
    Get a user's conversation entries, newest first.
    """
    return await query_recent(COLLECTION, {"user_id": str(user_id)}, limit, label="conversations")
