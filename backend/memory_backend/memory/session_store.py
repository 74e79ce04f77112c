"""
Session-scoped memory: stage progressions, context entries, breakthrough
moments and therapeutic themes recorded during a single session.
"""
import logging
import time
from typing import Dict, Any, List

from memory_backend.memory.records import insert_record, query_recent, utc_now_iso

logger = logging.getLogger(__name__)

# Session data key -> collection
SESSION_SECTIONS = {
    "stages": "session_stages",
    "context": "session_contexts",
    "breakthroughs": "session_breakthroughs",
    "themes": "session_themes",
}


async def store_session_stage_progression(user_id: str, session_id: str, stage_data: Dict[str, Any]) -> Dict[str, Any]:
    return await insert_record(
        SESSION_SECTIONS["stages"], user_id, stage_data,
        label="session stage", sessionId=session_id
    )


async def store_session_user_context(user_id: str, session_id: str, context_data: Dict[str, Any]) -> Dict[str, Any]:
    return await insert_record(
        SESSION_SECTIONS["context"], user_id, context_data,
        label="session context", sessionId=session_id
    )


async def store_breakthrough_moment(user_id: str, session_id: str, breakthrough_data: Dict[str, Any]) -> Dict[str, Any]:
    return await insert_record(
        SESSION_SECTIONS["breakthroughs"], user_id, breakthrough_data,
        label="breakthrough moment", sessionId=session_id
    )


async def store_therapeutic_theme(user_id: str, session_id: str, theme_data: Dict[str, Any]) -> Dict[str, Any]:
    return await insert_record(
        SESSION_SECTIONS["themes"], user_id, theme_data,
        label="therapeutic theme", sessionId=session_id
    )


async def get_session_data(
    user_id: str,
    session_id: str,
    data_type: str = "all",
    limit: int = 50
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Get the records of one session.

    Args:
        user_id: User ID
        session_id: Session ID
        data_type: "all" or one of "stages", "context", "breakthroughs", "themes"
        limit: Maximum records per section

    Returns:
        Dict keyed by section name, each a newest-first list. Unknown
        data_type values yield an empty dict.
    """
    query = {"user_id": str(user_id), "sessionId": session_id}
    session_data = {}

    for key, collection in SESSION_SECTIONS.items():
        if data_type in ("all", key):
            session_data[key] = await query_recent(collection, query, limit, label=f"session {key}")

    return session_data


async def get_current_session_id(user_id: str) -> str:
    """
    Generate an identifier for the user's current session.

    Format: session_<YYYY-MM-DD>_<epoch milliseconds>
    """
    today = utc_now_iso().split("T")[0]
    session_id = f"session_{today}_{int(time.time() * 1000)}"
    logger.debug(f"Session store: Generated session id {session_id} for user={user_id}")
    return session_id
