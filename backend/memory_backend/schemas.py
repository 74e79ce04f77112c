"""
Pydantic schemas for request validation.

Write requests carry `userUUID` next to an arbitrary record payload, so the
models accept extra fields and hand them to the stores untouched.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional, Union, Dict, Any


class MemoryWriteRequest(BaseModel):
    """
    Body of every memory write: the owner plus free-form record fields.
    """
    model_config = ConfigDict(extra="allow")

    userUUID: Optional[Union[str, int]] = None

    def payload(self) -> Dict[str, Any]:
        """Record fields without the owner identifier."""
        return dict(self.model_extra or {})


class WebhookEvent(BaseModel):
    """
    Inbound event from the voice platform.

    Field types are loose: the platform sends epoch-second timestamps, numeric
    ids and structured messages, and the receiver must not reject them.
    """
    model_config = ConfigDict(extra="allow")

    agent_id: Optional[Any] = None
    conversation_id: Optional[Any] = None
    user_id: Optional[Any] = None
    message: Optional[Any] = None
    message_type: Optional[Any] = None  # "user_message" or an agent message type
    timestamp: Optional[Any] = None


class ContextToolRequest(BaseModel):
    """
    get_user_context invocation.
    """
    user_id: Optional[str] = None
    context_type: str = "all"
    session_id: Optional[str] = None
    limit: int = 10
