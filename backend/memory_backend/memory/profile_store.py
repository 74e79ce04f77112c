"""
User profile persistence and full user-data erasure.
"""
import logging
from typing import Dict, Any, Optional

from memory_backend.database import get_database, USER_COLLECTIONS, SESSION_COLLECTIONS
from memory_backend.memory.records import clean_payload, utc_now_iso, DB_UNAVAILABLE

logger = logging.getLogger(__name__)

PROFILE_COLLECTION = "users"


async def store_user_profile(user_id: str, profile_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create or update a user profile.

    Fields are merged into the existing profile rather than replacing it,
    and `lastUpdated` is stamped on every write.

    Returns:
        {"success": True} or {"success": False, "error": str}
    """
    try:
        db = get_database()
        if db is None:
            logger.warning("Profile store: Database not available")
            return {"success": False, "error": DB_UNAVAILABLE}

        fields = clean_payload(profile_data)
        fields["lastUpdated"] = utc_now_iso()

        await db[PROFILE_COLLECTION].update_one(
            {"_id": str(user_id)},
            {"$set": fields},
            upsert=True
        )

        logger.info(f"Profile store: Profile stored for user={user_id}")
        return {"success": True}

    except Exception as e:
        logger.error(f"Profile store: Error storing user profile: {str(e)}", exc_info=True)
        return {"success": False, "error": str(e)}


async def get_user_profile(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a user profile.

    Returns:
        Profile fields (without the internal `_id`) or None if absent or unreadable
    """
    try:
        db = get_database()
        if db is None:
            logger.warning("Profile store: Database not available")
            return None

        profile_doc = await db[PROFILE_COLLECTION].find_one({"_id": str(user_id)})
        if not profile_doc:
            logger.debug(f"Profile store: No profile found for user={user_id}")
            return None

        return {k: v for k, v in profile_doc.items() if k != "_id"}

    except Exception as e:
        logger.error(f"Profile store: Error getting user profile: {str(e)}", exc_info=True)
        return None


async def clear_user_data(user_id: str) -> Dict[str, Any]:
    """
    Delete everything stored for a user: profile, history, stages, contexts and session records.

    The deletes run one after another without a transaction; a failure part way
    through leaves the remaining collections untouched and is reported as a failure.

    Returns:
        {"success": True, "deleted": {collection: count}} or {"success": False, "error": str}
    """
    try:
        db = get_database()
        if db is None:
            logger.warning("Profile store: Database not available, user data not cleared")
            return {"success": False, "error": DB_UNAVAILABLE}

        normalized_user_id = str(user_id)
        deleted = {}

        result = await db[PROFILE_COLLECTION].delete_one({"_id": normalized_user_id})
        deleted[PROFILE_COLLECTION] = result.deleted_count

        for name in USER_COLLECTIONS + SESSION_COLLECTIONS:
            result = await db[name].delete_many({"user_id": normalized_user_id})
            deleted[name] = result.deleted_count

        logger.info(f"Profile store: User data cleared for user={normalized_user_id} deleted={deleted}")
        return {"success": True, "deleted": deleted}

    except Exception as e:
        logger.error(f"Profile store: Error clearing user data: {str(e)}", exc_info=True)
        return {"success": False, "error": str(e)}
