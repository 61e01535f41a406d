import logging
from typing import Iterable, Optional

from supabase import Client

from app.core.access import require_participant

logger = logging.getLogger(__name__)


def _find_row(db: Client, user_id: str, conversation_id: str) -> Optional[dict]:
    response = (
        db.table("unread_counts")
        .select("*")
        .eq("user_id", str(user_id))
        .eq("conversation_id", str(conversation_id))
        .limit(1)
        .execute()
    )
    return response.data[0] if response.data else None


def increment(
    db: Client, conversation_id: str, recipient_ids: Iterable[str]
) -> list[str]:
    """
    Add one to each recipient's badge, creating missing rows at 1.

    Returns the recipients whose row was created by this call.
    """
    created = []
    for recipient_id in recipient_ids:
        row = _find_row(db, recipient_id, conversation_id)

        if row:
            (
                db.table("unread_counts")
                .update({"count": row["count"] + 1})
                .eq("id", row["id"])
                .execute()
            )
        else:
            db.table("unread_counts").insert(
                {
                    "user_id": str(recipient_id),
                    "conversation_id": str(conversation_id),
                    "count": 1,
                }
            ).execute()
            created.append(str(recipient_id))

    return created


def decrement(db: Client, conversation_id: str, recipient_ids: Iterable[str]) -> None:
    """Undo `increment` for the given recipients. Never goes below zero."""
    for recipient_id in recipient_ids:
        row = _find_row(db, recipient_id, conversation_id)
        if row and row["count"] > 0:
            (
                db.table("unread_counts")
                .update({"count": row["count"] - 1})
                .eq("id", row["id"])
                .execute()
            )


def remove(db: Client, conversation_id: str, recipient_ids: Iterable[str]) -> None:
    """Delete badge rows, used to undo rows created by `increment`."""
    for recipient_id in recipient_ids:
        (
            db.table("unread_counts")
            .delete()
            .eq("user_id", str(recipient_id))
            .eq("conversation_id", str(conversation_id))
            .execute()
        )


def reset(db: Client, user: dict, conversation_id: str) -> bool:
    """
    Zero the caller's badge for a conversation.

    Returns False when the caller never had a row for it; that is not an error.
    """
    require_participant(db, user, conversation_id)

    row = _find_row(db, user["id"], conversation_id)
    if not row:
        return False

    db.table("unread_counts").update({"count": 0}).eq("id", row["id"]).execute()
    logger.info(f"unread_reset user_id={user['id']} conversation_id={conversation_id}")
    return True


def list_for_user(db: Client, user_id: str) -> list[dict]:
    response = (
        db.table("unread_counts").select("*").eq("user_id", str(user_id)).execute()
    )
    return response.data or []


def counts_by_conversation(db: Client, user_id: str) -> dict[str, int]:
    return {
        str(row["conversation_id"]): row["count"] for row in list_for_user(db, user_id)
    }
