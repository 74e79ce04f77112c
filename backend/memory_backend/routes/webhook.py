"""
Inbound webhook from the voice platform.
"""
from fastapi import APIRouter, Header, Request
from datetime import datetime, timezone
from typing import Any, Optional
import hmac
import logging

from memory_backend.config import WebhookConfig
from memory_backend.exceptions import WebhookAuthError
from memory_backend.memory import store_conversation
from memory_backend.memory.records import utc_now_iso
from memory_backend.schemas import WebhookEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["webhook"])

WEBHOOK_SOURCE = "elevenlabs_webhook"
WEBHOOK_ACK = {"success": True, "message": "Webhook processed"}


def extract_webhook_secret(signature: Optional[str], authorization: Optional[str]) -> Optional[str]:
    """Pick the secret from the signature header, else from Authorization (Bearer prefix optional)."""
    provided = signature or authorization
    if not provided:
        return None
    provided = provided.strip()
    if provided.startswith("Bearer "):
        provided = provided[len("Bearer "):].strip()
    return provided or None


def verify_webhook_secret(provided: Optional[str], expected: Optional[str]) -> bool:
    """
    Constant-time equality check of the shared secret.

    Always true when no secret is configured.
    """
    if not expected:
        return True
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def normalize_user_id(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def normalize_timestamp(value: Any) -> str:
    """
    Event time as an ISO-8601 string.

    Numbers are epoch seconds; strings are kept as sent; anything else is
    replaced by the receive time.
    """
    if isinstance(value, bool) or value is None or value == "":
        return utc_now_iso()
    if isinstance(value, (int, float)):
        try:
            moment = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Webhook timestamp out of range: {value}")
            return utc_now_iso()
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return str(value)


def build_conversation_entry(event: WebhookEvent) -> dict:
    return {
        "type": "user" if event.message_type == "user_message" else "assistant",
        "content": event.message,
        "agent_id": event.agent_id,
        "conversation_id": event.conversation_id,
        "timestamp": normalize_timestamp(event.timestamp),
        "metadata": {"source": WEBHOOK_SOURCE},
    }


@router.post("/elevenlabs-webhook")
async def elevenlabs_webhook(
    request: Request,
    x_elevenlabs_signature: Optional[str] = Header(None),
    authorization: Optional[str] = Header(None),
):
    """
    Record voice platform messages as conversation entries.

    Receipt is always acknowledged once the secret check passes so the
    platform does not retry; unreadable bodies and storage failures are only
    logged.
    """
    provided = extract_webhook_secret(x_elevenlabs_signature, authorization)
    if not verify_webhook_secret(provided, WebhookConfig.SECRET):
        logger.warning("Invalid webhook secret provided")
        raise WebhookAuthError()

    try:
        body = await request.json()
    except ValueError as e:
        logger.warning(f"Webhook body is not valid JSON: {str(e)}")
        return WEBHOOK_ACK

    if not isinstance(body, dict):
        logger.warning(f"Webhook body is not a JSON object: {type(body).__name__}")
        return WEBHOOK_ACK

    event = WebhookEvent.model_validate(body)
    user_id = normalize_user_id(event.user_id)

    logger.info(
        f"Webhook received: conversation={event.conversation_id} "
        f"user={user_id} type={event.message_type}"
    )

    if user_id and event.message:
        result = await store_conversation(user_id, build_conversation_entry(event))
        if result.get("success"):
            logger.info(f"Webhook conversation stored id={result.get('id')}")
        else:
            logger.error(f"Failed to store webhook conversation: {result.get('error')}")
    else:
        logger.debug("Webhook event without user_id or message, nothing stored")

    return WEBHOOK_ACK
