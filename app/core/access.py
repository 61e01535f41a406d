import logging

from supabase import Client

from app.core.errors import NotFoundError, AccessDeniedError

logger = logging.getLogger(__name__)


def get_conversation(db: Client, conversation_id: str) -> dict:
    response = (
        db.table("conversations")
        .select("*")
        .eq("id", str(conversation_id))
        .limit(1)
        .execute()
    )

    if not response.data:
        raise NotFoundError("Conversation not found.")

    return response.data[0]


def get_participant_ids(db: Client, conversation_id: str) -> list[str]:
    response = (
        db.table("conversation_members")
        .select("user_id")
        .eq("conversation_id", str(conversation_id))
        .execute()
    )
    return [str(row["user_id"]) for row in response.data or []]


def require_participant(
    db: Client, user: dict, conversation_id: str
) -> tuple[dict, list[str]]:
    """
    Load a conversation and its participant ids, failing unless `user` is one
    of the participants.

    Raises NotFoundError when the conversation does not exist and
    AccessDeniedError when the caller is not a member.
    """
    conversation = get_conversation(db, conversation_id)
    participant_ids = get_participant_ids(db, conversation_id)

    if str(user["id"]) not in participant_ids:
        logger.warning(
            f"access_denied user_id={user['id']} conversation_id={conversation_id}"
        )
        raise AccessDeniedError()

    return conversation, participant_ids


def get_message(db: Client, message_id: str) -> dict:
    response = (
        db.table("messages").select("*").eq("id", str(message_id)).limit(1).execute()
    )

    if not response.data:
        raise NotFoundError("Message not found.")

    return response.data[0]
