"""
Storage gateway tests against the in-memory database.

Covers write stamping, newest-first reads, profile merging, full user-data
erasure and the never-raise contract when the database is missing or failing.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from memory_backend import database
from memory_backend.memory import (
    health_check,
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


class TestConversationStore:

    @pytest.mark.asyncio
    async def test_stored_entry_comes_back_with_id_and_timestamp(self, fake_db, user_id):
        result = await store_conversation(user_id, {"type": "user", "content": "Hello", "stage": "⊙"})

        assert result["success"] is True
        assert ObjectId.is_valid(result["id"])

        history = await get_conversation_history(user_id)
        assert len(history) == 1
        entry = history[0]
        assert entry["id"] == result["id"]
        assert entry["content"] == "Hello"
        assert entry["type"] == "user"
        assert entry["timestamp"].endswith("Z")
        assert entry["createdAt"].endswith("Z")
        assert "user_id" not in entry
        assert "_id" not in entry

    @pytest.mark.asyncio
    async def test_history_is_newest_first_and_limited(self, fake_db, user_id):
        for i in range(5):
            await store_conversation(user_id, {
                "type": "user",
                "content": f"message {i}",
                "timestamp": f"2024-01-0{i + 1}T10:00:00.000Z",
            })

        history = await get_conversation_history(user_id, limit=3)

        assert [h["content"] for h in history] == ["message 4", "message 3", "message 2"]

    @pytest.mark.asyncio
    async def test_same_timestamp_falls_back_to_insert_order(self, fake_db, user_id):
        stamp = "2024-05-01T09:00:00.000Z"
        await store_conversation(user_id, {"content": "first", "timestamp": stamp})
        await store_conversation(user_id, {"content": "second", "timestamp": stamp})

        history = await get_conversation_history(user_id)

        assert [h["content"] for h in history] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_history_is_partitioned_by_user(self, fake_db, user_id):
        await store_conversation(user_id, {"content": "mine"})
        await store_conversation("someone-else", {"content": "theirs"})

        history = await get_conversation_history(user_id)

        assert [h["content"] for h in history] == ["mine"]

    @pytest.mark.asyncio
    async def test_payload_cannot_override_owner(self, fake_db, user_id):
        await store_conversation(user_id, {"content": "x", "user_id": "intruder", "userUUID": "intruder"})

        stored = fake_db["conversations"].docs[0]
        assert stored["user_id"] == user_id
        assert "userUUID" not in stored


class TestStageAndContextStores:

    @pytest.mark.asyncio
    async def test_stage_progressions_round_trip(self, fake_db, user_id):
        await store_stage_progression(user_id, {"stage": "⊙", "timestamp": "2024-01-01T00:00:00.000Z"})
        await store_stage_progression(user_id, {"stage": "⚹", "timestamp": "2024-01-02T00:00:00.000Z"})

        stages = await get_user_stage_progressions(user_id)

        assert [s["stage"] for s in stages] == ["⚹", "⊙"]

    @pytest.mark.asyncio
    async def test_user_context_default_limit(self, fake_db, user_id):
        for i in range(25):
            await store_user_context(user_id, {"note": i, "timestamp": f"2024-01-01T00:00:{i:02d}.000Z"})

        contexts = await get_user_context(user_id)

        assert len(contexts) == 20
        assert contexts[0]["note"] == 24


class TestProfileStore:

    @pytest.mark.asyncio
    async def test_missing_profile_is_none(self, fake_db, user_id):
        assert await get_user_profile(user_id) is None

    @pytest.mark.asyncio
    async def test_profile_updates_merge(self, fake_db, user_id):
        await store_user_profile(user_id, {"symbolicName": "River", "sessionCount": 1})
        result = await store_user_profile(user_id, {"currentStage": "⚹", "sessionCount": 2})

        assert result == {"success": True}
        profile = await get_user_profile(user_id)
        assert profile["symbolicName"] == "River"
        assert profile["currentStage"] == "⚹"
        assert profile["sessionCount"] == 2
        assert "lastUpdated" in profile
        assert "_id" not in profile

    @pytest.mark.asyncio
    async def test_clear_user_data_removes_everything_for_that_user(self, fake_db, user_id):
        await store_user_profile(user_id, {"symbolicName": "River"})
        await store_conversation(user_id, {"content": "hi"})
        await store_stage_progression(user_id, {"stage": "⊙"})
        await store_user_context(user_id, {"mood": "calm"})
        await store_breakthrough_moment(user_id, "session_a", {"insight": "x"})
        await store_conversation("other-user", {"content": "keep me"})

        result = await clear_user_data(user_id)

        assert result["success"] is True
        assert result["deleted"]["users"] == 1
        assert result["deleted"]["conversations"] == 1
        assert result["deleted"]["stages"] == 1
        assert result["deleted"]["session_breakthroughs"] == 1
        assert await get_user_profile(user_id) is None
        assert await get_conversation_history(user_id) == []
        assert await get_user_stage_progressions(user_id) == []
        assert await get_user_context(user_id) == []
        assert len(await get_conversation_history("other-user")) == 1


class TestSessionStore:

    @pytest.mark.asyncio
    async def test_session_records_are_scoped_and_tagged(self, fake_db, user_id):
        await store_session_stage_progression(user_id, "session_a", {"stage": "⊙"})
        await store_session_user_context(user_id, "session_a", {"topic": "work"})
        await store_breakthrough_moment(user_id, "session_a", {"insight": "letting go"})
        await store_therapeutic_theme(user_id, "session_a", {"theme": "integration"})
        await store_therapeutic_theme(user_id, "session_b", {"theme": "other"})

        data = await get_session_data(user_id, "session_a")

        assert set(data) == {"stages", "context", "breakthroughs", "themes"}
        assert data["stages"][0]["stage"] == "⊙"
        assert data["stages"][0]["sessionId"] == "session_a"
        assert data["context"][0]["topic"] == "work"
        assert data["breakthroughs"][0]["insight"] == "letting go"
        assert [t["theme"] for t in data["themes"]] == ["integration"]

    @pytest.mark.asyncio
    async def test_session_data_type_filter(self, fake_db, user_id):
        await store_therapeutic_theme(user_id, "session_a", {"theme": "integration"})

        data = await get_session_data(user_id, "session_a", data_type="themes")

        assert list(data) == ["themes"]

    @pytest.mark.asyncio
    async def test_unknown_session_is_empty(self, fake_db, user_id):
        data = await get_session_data(user_id, "missing")

        assert data == {"stages": [], "context": [], "breakthroughs": [], "themes": []}

    @pytest.mark.asyncio
    async def test_current_session_id_format(self, user_id):
        session_id = await get_current_session_id(user_id)

        prefix, day, millis = session_id.split("_")
        assert prefix == "session"
        assert len(day) == 10 and day[4] == "-" and day[7] == "-"
        assert millis.isdigit()


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_writes_fail_softly_without_database(self, no_db, user_id):
        result = await store_conversation(user_id, {"content": "hi"})

        assert result == {"success": False, "error": "Database not available"}
        assert (await store_user_profile(user_id, {"name": "x"}))["success"] is False
        assert (await clear_user_data(user_id))["success"] is False

    @pytest.mark.asyncio
    async def test_reads_default_without_database(self, no_db, user_id):
        assert await get_conversation_history(user_id) == []
        assert await get_user_profile(user_id) is None
        assert await get_user_stage_progressions(user_id) == []
        assert await get_session_data(user_id, "session_a") == {
            "stages": [], "context": [], "breakthroughs": [], "themes": []
        }

    @pytest.mark.asyncio
    async def test_driver_errors_are_converted(self, user_id):
        collection = MagicMock()
        collection.insert_one = AsyncMock(side_effect=RuntimeError("connection reset"))
        collection.find = MagicMock(side_effect=RuntimeError("connection reset"))
        collection.find_one = AsyncMock(side_effect=RuntimeError("connection reset"))
        broken = MagicMock()
        broken.__getitem__.return_value = collection
        database.set_database(broken)
        try:
            result = await store_conversation(user_id, {"content": "hi"})
            assert result == {"success": False, "error": "connection reset"}
            assert await get_conversation_history(user_id) == []
            assert await get_user_profile(user_id) is None
        finally:
            database.set_database(None)


class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_healthy_with_database(self, fake_db):
        assert await health_check() == {"status": "healthy", "service": "mongodb"}

    @pytest.mark.asyncio
    async def test_unhealthy_without_database(self, no_db):
        result = await health_check()

        assert result["status"] == "unhealthy"
        assert result["error"] == "Database not available"
