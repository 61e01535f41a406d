import logging

from postgrest.exceptions import APIError
from supabase import Client

from app.core.access import require_participant, get_message
from app.core.errors import AccessDeniedError, ValidationFailedError
from app.typing_state.service import clear_typing
from app.unread import service as unread_service
from app.utils import clock
from app.utils.profiles import get_profiles

logger = logging.getLogger(__name__)


def send(db: Client, user: dict, conversation_id: str, content: str) -> str:
    """
    Append a message to a conversation and fan out unread badges.

    Every check runs before the first write. If a write after the message
    insert fails, the earlier writes are undone before the error propagates.
    """
    content = content.strip()
    if not content:
        raise ValidationFailedError("Message content must not be blank.")

    conversation, participant_ids = require_participant(db, user, conversation_id)

    sender_id = str(user["id"])
    conversation_id = str(conversation_id)
    recipients = [pid for pid in participant_ids if pid != sender_id]

    msg_res = (
        db.table("messages")
        .insert(
            {
                "conversation_id": conversation_id,
                "sender_id": sender_id,
                "content": content,
                "deleted": False,
                "created_at": clock.now_ms(),
            }
        )
        .execute()
    )
    message_id = str(msg_res.data[0]["id"])

    pointer_moved = False
    bumped = []
    created = []
    try:
        (
            db.table("conversations")
            .update({"last_message_id": message_id})
            .eq("id", conversation_id)
            .execute()
        )
        pointer_moved = True

        for recipient_id in recipients:
            if unread_service.increment(db, conversation_id, [recipient_id]):
                created.append(recipient_id)
            else:
                bumped.append(recipient_id)

        clear_typing(db, sender_id, conversation_id)

    except APIError:
        logger.exception(f"message_send_rollback message_id={message_id}")
        unread_service.decrement(db, conversation_id, bumped)
        unread_service.remove(db, conversation_id, created)
        if pointer_moved:
            (
                db.table("conversations")
                .update({"last_message_id": conversation.get("last_message_id")})
                .eq("id", conversation_id)
                .execute()
            )
        db.table("messages").delete().eq("id", message_id).execute()
        raise

    logger.info(
        f"message_sent message_id={message_id} conversation_id={conversation_id} "
        f"sender_id={sender_id} recipients={len(recipients)}"
    )
    return message_id


def list_messages(db: Client, user: dict, conversation_id: str) -> list[dict]:
    """Oldest first. Deleted messages are kept with their content blanked."""
    require_participant(db, user, conversation_id)

    messages = (
        db.table("messages")
        .select("*")
        .eq("conversation_id", str(conversation_id))
        .order("created_at", desc=False)
        .execute()
    ).data or []

    senders = get_profiles(db, [row["sender_id"] for row in messages])

    final_data = []
    for row in messages:
        sender = senders.get(str(row["sender_id"]))
        final_data.append(
            {
                **row,
                "content": "" if row.get("deleted") else row["content"],
                "sender_name": sender["name"] if sender else None,
            }
        )
    return final_data


def soft_delete(db: Client, user: dict, message_id: str) -> bool:
    message = get_message(db, message_id)

    if str(message["sender_id"]) != str(user["id"]):
        raise AccessDeniedError("Only the sender can delete this message.")

    db.table("messages").update({"deleted": True}).eq("id", str(message_id)).execute()

    logger.info(f"message_deleted message_id={message_id}")
    return True
