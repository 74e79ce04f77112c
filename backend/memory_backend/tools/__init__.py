"""
Tools exposed to the conversational-AI platform.
"""
import logging
from typing import Dict, Any, List, Optional

from memory_backend.tools.context_tool import ContextTool, SectionResult

logger = logging.getLogger(__name__)

_tools: Optional[Dict[str, Any]] = None


def initialize_tools(store=None) -> Dict[str, Any]:
    """
    Build the tool registry around a memory store.

    Args:
        store: Object exposing the memory store coroutines; defaults to memory_backend.memory
    """
    global _tools
    context_tool = ContextTool(store) if store is not None else ContextTool()
    _tools = {context_tool.name: context_tool}
    logger.info(f"Tools initialized: {list(_tools)}")
    return _tools


def get_tools() -> Dict[str, Any]:
    """Return the tool registry, building it with the default store on first use."""
    if _tools is None:
        return initialize_tools()
    return _tools


def get_tool_schemas() -> List[Dict[str, Any]]:
    """Function-call schemas for every registered tool."""
    return [tool.schema for tool in get_tools().values()]


__all__ = [
    "ContextTool",
    "SectionResult",
    "initialize_tools",
    "get_tools",
    "get_tool_schemas",
]
