"""
Storage gateway for conversational memory: history, profiles, stages, context and sessions.
"""
from memory_backend.memory.health import health_check
from memory_backend.memory.conversation_store import store_conversation, get_conversation_history
from memory_backend.memory.stage_store import store_stage_progression, get_user_stage_progressions
from memory_backend.memory.profile_store import store_user_profile, get_user_profile, clear_user_data
from memory_backend.memory.context_store import store_user_context, get_user_context
from memory_backend.memory.session_store import (
    store_session_stage_progression,
    store_session_user_context,
    store_breakthrough_moment,
    store_therapeutic_theme,
    get_session_data,
    get_current_session_id,
)

__all__ = [
    "health_check",
    "store_conversation",
    "get_conversation_history",
    "store_stage_progression",
    "get_user_stage_progressions",
    "store_user_profile",
    "get_user_profile",
    "clear_user_data",
    "store_user_context",
    "get_user_context",
    "store_session_stage_progression",
    "store_session_user_context",
    "store_breakthrough_moment",
    "store_therapeutic_theme",
    "get_session_data",
    "get_current_session_id",
]
