"""
Tool endpoints for the conversational-AI platform.
"""
from fastapi import APIRouter
import logging

from memory_backend.exceptions import ValidationError, ServiceUnavailableError
from memory_backend.schemas import ContextToolRequest
from memory_backend.tools import get_tools, get_tool_schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tools", tags=["tools"])


@router.get("")
async def list_tools():
    """Function-call schemas the platform registers for the agent."""
    return {"tools": get_tool_schemas()}


@router.post("/context")
async def run_context_tool(request: ContextToolRequest):
    """
    Execute get_user_context.
    """
    context_tool = get_tools().get("get_user_context")
    if context_tool is None:
        raise ServiceUnavailableError("Context tool not available")

    if not request.user_id:
        raise ValidationError("user_id is required")

    result = await context_tool.execute({
        "user_id": request.user_id,
        "context_type": request.context_type,
        "session_id": request.session_id,
        "limit": request.limit,
    })

    if not result.get("success"):
        logger.warning(f"Context tool failed for user={request.user_id}: {result.get('error')}")
    return result
