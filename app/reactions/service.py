import logging

from supabase import Client

from app.core.access import require_participant, get_message
from app.core.errors import ValidationFailedError
from app.utils import clock

logger = logging.getLogger(__name__)

SUPPORTED_EMOJIS = ["👍", "❤️", "😂", "😮", "😢"]


def _require_message_access(db: Client, user: dict, message_id: str) -> dict:
    message = get_message(db, message_id)
    require_participant(db, user, message["conversation_id"])
    return message


def toggle(db: Client, user: dict, message_id: str, emoji: str) -> dict:
    """
    Add the caller's `emoji` reaction to a message, or remove it if present.

    Returns `{"added": True}` or `{"removed": True}`.
    """
    if emoji not in SUPPORTED_EMOJIS:
        raise ValidationFailedError("Unsupported emoji")

    _require_message_access(db, user, message_id)

    existing = (
        db.table("reactions")
        .select("id")
        .eq("message_id", str(message_id))
        .eq("user_id", str(user["id"]))
        .eq("emoji", emoji)
        .limit(1)
        .execute()
    )

    if existing.data:
        db.table("reactions").delete().eq("id", existing.data[0]["id"]).execute()
        logger.info(f"reaction_removed message_id={message_id} user_id={user['id']}")
        return {"removed": True}

    db.table("reactions").insert(
        {
            "message_id": str(message_id),
            "user_id": str(user["id"]),
            "emoji": emoji,
            "created_at": clock.now_ms(),
        }
    ).execute()
    logger.info(f"reaction_added message_id={message_id} user_id={user['id']}")
    return {"added": True}


def list_by_message(db: Client, user: dict, message_id: str) -> list[dict]:
    _require_message_access(db, user, message_id)

    return (
        db.table("reactions")
        .select("*")
        .eq("message_id", str(message_id))
        .order("created_at")
        .execute()
    ).data or []


def summarize(rows: list[dict], user_id: str) -> list[dict]:
    """Count reactions per emoji, in the order the picker shows them."""
    summary = []
    for emoji in SUPPORTED_EMOJIS:
        matching = [row for row in rows if row["emoji"] == emoji]
        if matching:
            summary.append(
                {
                    "emoji": emoji,
                    "count": len(matching),
                    "reacted_by_me": any(
                        str(row["user_id"]) == str(user_id) for row in matching
                    ),
                }
            )
    return summary
