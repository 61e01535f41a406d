import logging
from typing import Optional

from supabase import Client

from app.core.dependencies import find_user_by_identity
from app.conversations.service import direct_conversations_for_user
from app.unread.service import counts_by_conversation
from app.utils import clock

logger = logging.getLogger(__name__)


def sync_user(db: Client, clerk_id: str, name: str, email: str, image_url: str) -> str:
    """
    Upsert the user keyed by identity-provider id and mark them online.

    Returns the internal user id.
    """
    now = clock.now_ms()
    existing_user = find_user_by_identity(db, clerk_id)

    if existing_user:
        (
            db.table("users")
            .update(
                {
                    "name": name,
                    "email": email,
                    "image_url": image_url,
                    "online": True,
                    "last_seen": now,
                }
            )
            .eq("id", existing_user["id"])
            .execute()
        )
        logger.info(f"user_synced user_id={existing_user['id']}")
        return str(existing_user["id"])

    created = (
        db.table("users")
        .insert(
            {
                "clerk_id": clerk_id,
                "name": name,
                "email": email,
                "image_url": image_url,
                "online": True,
                "last_seen": now,
            }
        )
        .execute()
    )
    user_id = str(created.data[0]["id"])

    logger.info(f"user_created user_id={user_id}")
    return user_id


def update_status(db: Client, user: dict, online: bool) -> dict:
    now = clock.now_ms()

    (
        db.table("users")
        .update({"online": online, "last_seen": now})
        .eq("id", user["id"])
        .execute()
    )
    return {"online": online, "last_seen": now}


def list_others(db: Client, user: dict) -> list[dict]:
    """
    Every user except the caller, annotated for the contact list.

    `conversation_id` is the caller's direct conversation with that user (if
    any) and `unread_count` the caller's badge for it.
    """
    users = (
        db.table("users").select("*").neq("id", str(user["id"])).order("name").execute()
    ).data or []

    direct = direct_conversations_for_user(db, user["id"])
    unread = counts_by_conversation(db, user["id"])

    annotated = []
    for other in users:
        conversation_id = direct.get(str(other["id"]))
        annotated.append(
            {
                **other,
                "conversation_id": conversation_id,
                "unread_count": unread.get(conversation_id, 0) if conversation_id else 0,
            }
        )
    return annotated


def get_me(db: Client, identity_id: Optional[str]) -> Optional[dict]:
    if not identity_id:
        return None
    return find_user_by_identity(db, identity_id)
