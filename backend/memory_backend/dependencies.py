"""
Centralized FastAPI dependencies for request authentication.
"""
from fastapi import Header
from typing import Optional
import logging

from memory_backend.config import ServerConfig
from memory_backend.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


async def require_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """
    FastAPI dependency requiring a bearer token outside development.

    Token verification belongs to the identity provider; this only rejects
    requests that carry no token at all.

    Usage:
        @router.post("/protected", dependencies=[Depends(require_bearer_token)])
    """
    if ServerConfig.is_development():
        logger.debug("Auth: allowing request in development mode")
        return None

    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("No auth token provided")

    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("No auth token provided")

    return token
