"""
get_user_context tool.

Gathers conversation history, profile, stage progressions and session records
for a user and condenses them into a snapshot plus instructions the voice
agent can follow to keep continuity across sessions.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from memory_backend import memory as default_store
from memory_backend.memory.records import utc_now_iso

logger = logging.getLogger(__name__)

CONTEXT_TYPES = ["conversation", "profile", "stages", "session", "all"]

DEFAULT_LIMIT = 10
MIN_LIMIT = 1
MAX_LIMIT = 50

RECENT_MESSAGE_COUNT = 5
PREVIEW_CHARS = 200

DEFAULT_STAGE = "⊙"

# Substring in lowercased history -> theme label
THEME_KEYWORDS = [
    ("contradiction", "contradictions/tensions"),
    ("completion", "completion work"),
    ("fragment", "fragmentation"),
    ("integration", "integration"),
]


@dataclass
class SectionResult:
    """
    Outcome of fetching one context category.

    Exactly one of `data` / `error` is meaningful: a failed category carries
    only its error so the other categories are reported independently.
    """
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        if not self.ok:
            return {"error": self.error}
        return self.data


def clamp_limit(limit: Any) -> int:
    """Coerce a limit into [MIN_LIMIT, MAX_LIMIT], falling back to DEFAULT_LIMIT."""
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


def truncate(content: Any, max_chars: int = PREVIEW_CHARS) -> str:
    content = "" if content is None else str(content)
    if len(content) > max_chars:
        return content[:max_chars] + "..."
    return content


class ContextTool:
    """Retrieves and summarizes a user's stored memory for the voice agent."""

    name = "get_user_context"
    description = (
        "Retrieve conversation history, user profile, and symbolic progression data "
        "to maintain continuity across sessions."
    )

    def __init__(self, store=default_store):
        # Any object exposing the memory store coroutines
        self.store = store
        self.schema = {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        "user_id": {
                            "type": "string",
                            "description": "The unique identifier for the user",
                        },
                        "context_type": {
                            "type": "string",
                            "enum": CONTEXT_TYPES,
                            "description": "Type of context to retrieve",
                        },
                        "session_id": {
                            "type": "string",
                            "description": (
                                "Specific session ID to retrieve data for "
                                "(optional, uses current session if not provided)"
                            ),
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": MIN_LIMIT,
                            "maximum": MAX_LIMIT,
                            "default": DEFAULT_LIMIT,
                            "description": "Number of recent entries to retrieve",
                        },
                    },
                    "required": ["user_id"],
                },
            },
        }

    async def execute(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the tool.

        Args:
            parameters: user_id (required), context_type, session_id, limit

        Returns:
            {"success": True, "data": {...}, "instructions": [...]} or
            {"success": False, "error": str}
        """
        user_id = parameters.get("user_id")
        context_type = parameters.get("context_type") or "all"
        session_id = parameters.get("session_id")
        limit = clamp_limit(parameters.get("limit", DEFAULT_LIMIT))

        if not user_id:
            return {"success": False, "error": "User ID is required"}

        if self.store is None:
            return {"success": False, "error": "Memory store not available"}

        if context_type not in CONTEXT_TYPES:
            return {"success": False, "error": f"Invalid context_type: {context_type}"}

        try:
            current_session_id = session_id or await self.store.get_current_session_id(user_id)

            result = {
                "user_id": user_id,
                "session_id": current_session_id,
                "timestamp": utc_now_iso(),
                "context": {},
            }

            sections: Dict[str, SectionResult] = {}
            if context_type in ("conversation", "all"):
                sections["conversations"] = await self._conversation_section(user_id, limit)
            if context_type in ("profile", "all"):
                sections["profile"] = await self._profile_section(user_id)
            if context_type in ("stages", "all"):
                sections["stages"] = await self._stages_section(user_id, limit, sections.get("profile"))
            if context_type in ("session", "all") and current_session_id:
                sections["session"] = await self._session_section(user_id, current_session_id)

            for key, section in sections.items():
                if not section.ok:
                    logger.warning(f"Context tool: {key} unavailable for user={user_id}: {section.error}")
                value = section.to_dict()
                if value is not None:
                    result["context"][key] = value

            return {
                "success": True,
                "data": result,
                "instructions": self.generate_instructions(result),
            }

        except Exception as e:
            logger.error(f"Context tool: retrieval failed for user={user_id}: {e}", exc_info=True)
            return {"success": False, "error": f"Context retrieval failed: {str(e)}"}

    async def _conversation_section(self, user_id: str, limit: int) -> SectionResult:
        try:
            conversations = await self.store.get_conversation_history(user_id, limit)
        except Exception as e:
            logger.error(f"Context tool: conversation lookup failed: {e}")
            return SectionResult(error="Failed to retrieve conversations")

        return SectionResult(data={
            "total": len(conversations),
            "recent_messages": [
                {
                    "type": msg.get("type"),
                    "content": truncate(msg.get("content")),
                    "stage": msg.get("stage"),
                    "timestamp": msg.get("timestamp"),
                }
                for msg in conversations[:RECENT_MESSAGE_COUNT]
            ],
            "summary": self.generate_conversation_summary(conversations),
        })

    async def _profile_section(self, user_id: str) -> SectionResult:
        try:
            profile = await self.store.get_user_profile(user_id)
        except Exception as e:
            logger.error(f"Context tool: profile lookup failed: {e}")
            return SectionResult(error="Failed to retrieve profile")

        if not profile:
            return SectionResult()

        return SectionResult(data={
            "symbolic_name": profile.get("symbolicName") or profile.get("name"),
            "current_stage": profile.get("currentStage") or profile.get("lastStage"),
            "registration_date": profile.get("registrationDate") or profile.get("createdAt"),
            "session_count": profile.get("sessionCount") or 0,
            "themes": profile.get("recurring_themes") or [],
        })

    async def _stages_section(
        self,
        user_id: str,
        limit: int,
        profile_section: Optional[SectionResult]
    ) -> SectionResult:
        try:
            stages = await self.store.get_user_stage_progressions(user_id, limit)
        except Exception as e:
            logger.error(f"Context tool: stage lookup failed: {e}")
            return SectionResult(error="Failed to retrieve stage data")

        current_stage = None
        if profile_section is not None and profile_section.ok and profile_section.data:
            current_stage = profile_section.data.get("current_stage")
        if not current_stage and stages:
            current_stage = stages[0].get("stage")

        return SectionResult(data={
            "current_stage": current_stage or DEFAULT_STAGE,
            "progression_notes": "Stage progression tracking active",
            "total_progressions": len(stages),
        })

    async def _session_section(self, user_id: str, session_id: str) -> SectionResult:
        try:
            session_data = await self.store.get_session_data(user_id, session_id)
        except Exception as e:
            logger.error(f"Context tool: session lookup failed: {e}")
            return SectionResult(error="Failed to retrieve session data")

        return SectionResult(data={
            "session_id": session_id,
            "stage_progressions": session_data.get("stages") or [],
            "user_context": session_data.get("context") or [],
            "breakthrough_moments": session_data.get("breakthroughs") or [],
            "therapeutic_themes": session_data.get("themes") or [],
            "summary": self.generate_session_summary(session_data),
        })

    @staticmethod
    def generate_conversation_summary(conversations: List[Dict[str, Any]]) -> str:
        if not conversations:
            return "No previous conversation history found."

        user_messages = sum(1 for c in conversations if c.get("type") == "user")
        assistant_messages = sum(1 for c in conversations if c.get("type") == "assistant")

        stages = []
        for c in conversations:
            stage = c.get("stage")
            if stage and stage not in stages:
                stages.append(stage)

        summary = f"Previous sessions: {user_messages} user messages, {assistant_messages} VASA responses."

        if stages:
            summary += f" CSS stages explored: {', '.join(str(s) for s in stages)}."

        all_content = " ".join(str(c.get("content") or "") for c in conversations).lower()
        themes = [label for keyword, label in THEME_KEYWORDS if keyword in all_content]

        if themes:
            summary += f" Recurring themes: {', '.join(themes)}."

        return summary

    @staticmethod
    def generate_session_summary(session_data: Dict[str, Any]) -> str:
        parts = []

        stages = session_data.get("stages") or []
        if stages:
            parts.append(f"CSS stages in this session: {', '.join(str(s.get('stage')) for s in stages)}")

        breakthroughs = session_data.get("breakthroughs") or []
        if breakthroughs:
            parts.append(f"{len(breakthroughs)} breakthrough moment(s) identified")

        themes = session_data.get("themes") or []
        if themes:
            names = ", ".join(str(t.get("theme") or t.get("name")) for t in themes)
            parts.append(f"Therapeutic themes: {names}")

        contexts = session_data.get("context") or []
        if contexts:
            parts.append(f"{len(contexts)} context entries recorded")

        return ". ".join(parts) or "New session, no data recorded yet."

    @staticmethod
    def generate_instructions(context_data: Dict[str, Any]) -> List[str]:
        context = context_data.get("context", {})
        conversations = context.get("conversations") or {}
        profile = context.get("profile") or {}

        instructions = []

        if conversations.get("total", 0) > 0:
            instructions.append("Reference previous conversation when relevant.")
            instructions.append("Build upon established symbolic themes and patterns.")

        if profile.get("symbolic_name"):
            instructions.append(f"Address user by their symbolic name: {profile['symbolic_name']}.")

        if profile.get("current_stage"):
            instructions.append(f"Continue from CSS stage: {profile['current_stage']}.")

        instructions.append("Acknowledge conversation continuity naturally in your response.")

        return instructions
