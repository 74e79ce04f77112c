"""
Memory endpoints: conversation history, profiles, stages, context and sessions.
"""
from fastapi import APIRouter, Depends
from typing import Optional, Tuple, Dict, Any
import logging

from memory_backend.dependencies import require_bearer_token
from memory_backend.exceptions import ValidationError, NotFoundError
from memory_backend.schemas import MemoryWriteRequest
from memory_backend.memory import (
    store_conversation,
    get_conversation_history,
    store_stage_progression,
    get_user_stage_progressions,
    store_user_profile,
    get_user_profile,
    clear_user_data,
    store_user_context,
    get_user_context,
    store_session_stage_progression,
    store_session_user_context,
    store_breakthrough_moment,
    store_therapeutic_theme,
    get_session_data,
    get_current_session_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/memory", tags=["memory"])


def _split_request(request: MemoryWriteRequest) -> Tuple[str, Dict[str, Any]]:
    """Return (userUUID, payload), rejecting bodies without an owner."""
    if request.userUUID is None or request.userUUID == "":
        raise ValidationError("userUUID is required")
    return str(request.userUUID), request.payload()


@router.post("/conversation", dependencies=[Depends(require_bearer_token)])
async def post_conversation(request: MemoryWriteRequest):
    user_id, conversation_data = _split_request(request)
    return await store_conversation(user_id, conversation_data)


@router.get("/conversation/{userUUID}")
async def get_conversation(userUUID: str, limit: int = 50):
    return await get_conversation_history(userUUID, limit)


@router.post("/stage")
async def post_stage(request: MemoryWriteRequest):
    user_id, stage_data = _split_request(request)
    logger.debug(f"Stage progression request received user={user_id} data={stage_data}")
    return await store_stage_progression(user_id, stage_data)


@router.get("/stages/{userUUID}")
async def get_stages(userUUID: str, limit: int = 50):
    return await get_user_stage_progressions(userUUID, limit)


@router.post("/profile")
async def post_profile(request: MemoryWriteRequest):
    user_id, profile_data = _split_request(request)
    return await store_user_profile(user_id, profile_data)


@router.get("/profile/{userUUID}")
async def get_profile(userUUID: str):
    profile = await get_user_profile(userUUID)
    if not profile:
        raise NotFoundError("Profile")
    return profile


@router.delete("/user/{userUUID}")
async def delete_user_data(userUUID: str):
    """
    Erase every record stored for a user.
    """
    logger.info(f"Clearing data for user={userUUID}")
    result = await clear_user_data(userUUID)
    if not result.get("success"):
        logger.warning(f"Clearing data for user={userUUID} failed: {result.get('error')}")
        return result
    return {**result, "message": "User data cleared"}


@router.post("/context")
async def post_context(request: MemoryWriteRequest):
    user_id, context_data = _split_request(request)
    return await store_user_context(user_id, context_data)


@router.get("/context/{userUUID}")
async def get_context(userUUID: str, limit: int = 20):
    return await get_user_context(userUUID, limit)


@router.post("/session/{sessionId}/stage")
async def post_session_stage(sessionId: str, request: MemoryWriteRequest):
    user_id, stage_data = _split_request(request)
    return await store_session_stage_progression(user_id, sessionId, stage_data)


@router.post("/session/{sessionId}/context")
async def post_session_context(sessionId: str, request: MemoryWriteRequest):
    user_id, context_data = _split_request(request)
    return await store_session_user_context(user_id, sessionId, context_data)


@router.post("/session/{sessionId}/breakthrough")
async def post_session_breakthrough(sessionId: str, request: MemoryWriteRequest):
    user_id, breakthrough_data = _split_request(request)
    return await store_breakthrough_moment(user_id, sessionId, breakthrough_data)


@router.post("/session/{sessionId}/theme")
async def post_session_theme(sessionId: str, request: MemoryWriteRequest):
    user_id, theme_data = _split_request(request)
    return await store_therapeutic_theme(user_id, sessionId, theme_data)


@router.get("/session/{sessionId}")
async def get_session(
    sessionId: str,
    userUUID: Optional[str] = None,
    dataType: str = "all",
    limit: int = 50
):
    """
    Get session records; `dataType` narrows to stages, context, breakthroughs or themes.
    """
    if not userUUID:
        raise ValidationError("userUUID is required")
    return await get_session_data(userUUID, sessionId, dataType, limit)


@router.get("/current-session/{userUUID}")
async def get_current_session(userUUID: str):
    session_id = await get_current_session_id(userUUID)
    return {"sessionId": session_id}
