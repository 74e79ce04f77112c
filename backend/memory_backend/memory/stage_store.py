"""
Stage progression persistence.
"""
from typing import List, Dict, Any

from memory_backend.memory.records import insert_record, query_recent

COLLECTION = "stages"


async def store_stage_progression(user_id: str, stage_data: Dict[str, Any]) -> Dict[str, Any]:
    return await insert_record(COLLECTION, user_id, stage_data, label="stage progression")


async def get_user_stage_progressions(user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    return await query_recent(COLLECTION, {"user_id": str(user_id)}, limit, label="stage progressions")
