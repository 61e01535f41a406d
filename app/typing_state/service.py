import logging
from typing import Optional

from supabase import Client

from app.core.access import require_participant
from app.utils import clock
from app.utils.env_helper import env_int
from app.utils.profiles import get_profiles

logger = logging.getLogger(__name__)

TYPING_TTL_MS = env_int("TYPING_TTL_MS", 3000)


def format_typing_names(names: list[str]) -> Optional[str]:
    """
    Join typing users' names into one line.

    >>> format_typing_names(["Alice", "Bob", "Carol"])
    'Alice, Bob and 1 more'
    """
    if not names:
        return None
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{names[0]}, {names[1]} and {len(names) - 2} more"


def set_typing(db: Client, user: dict, conversation_id: str) -> int:
    """Renew the caller's typing marker. Returns the new expiry."""
    require_participant(db, user, conversation_id)

    expires_at = clock.now_ms() + TYPING_TTL_MS

    existing = (
        db.table("typing_markers")
        .select("id")
        .eq("conversation_id", str(conversation_id))
        .eq("user_id", str(user["id"]))
        .limit(1)
        .execute()
    )

    if existing.data:
        (
            db.table("typing_markers")
            .update({"expires_at": expires_at})
            .eq("id", existing.data[0]["id"])
            .execute()
        )
    else:
        db.table("typing_markers").insert(
            {
                "conversation_id": str(conversation_id),
                "user_id": str(user["id"]),
                "expires_at": expires_at,
            }
        ).execute()

    return expires_at


def clear_typing(db: Client, user_id: str, conversation_id: str) -> None:
    (
        db.table("typing_markers")
        .delete()
        .eq("conversation_id", str(conversation_id))
        .eq("user_id", str(user_id))
        .execute()
    )


def get_indicator(db: Client, user: dict, conversation_id: str) -> Optional[str]:
    """
    "X is typing" text for everyone but the caller, or None.

    Markers whose expiry has passed are skipped here; nothing removes them.
    """
    require_participant(db, user, conversation_id)

    markers = (
        db.table("typing_markers")
        .select("user_id, expires_at")
        .eq("conversation_id", str(conversation_id))
        .neq("user_id", str(user["id"]))
        .gt("expires_at", clock.now_ms())
        .order("expires_at", desc=True)
        .execute()
    ).data or []

    if not markers:
        return None

    profiles = get_profiles(db, [row["user_id"] for row in markers])
    names = [
        profiles[str(row["user_id"])]["name"]
        for row in markers
        if str(row["user_id"]) in profiles
    ]
    return format_typing_names(names)
