import logging
from typing import Iterable, Optional

from postgrest.exceptions import APIError
from supabase import Client

from app.core.access import require_participant
from app.core.errors import NotFoundError, ValidationFailedError
from app.utils.profiles import get_profile, get_profiles
from app.unread.service import counts_by_conversation

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def canonical_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Sorted pair used as the lookup key of a direct conversation."""
    u1, u2 = sorted([str(user_a), str(user_b)])
    return u1, u2


def find_direct_conversation_id(db: Client, user_a: str, user_b: str) -> Optional[str]:
    u1, u2 = canonical_pair(user_a, user_b)

    direct_convo = (
        db.table("direct_conversations")
        .select("conversation_id")
        .eq("user1_id", u1)
        .eq("user2_id", u2)
        .limit(1)
        .execute()
    )

    if direct_convo.data:
        return str(direct_convo.data[0]["conversation_id"])
    return None


def direct_conversations_for_user(db: Client, user_id: str) -> dict[str, str]:
    """Map of other user id -> direct conversation id for `user_id`."""
    user_id = str(user_id)
    rows = (
        db.table("direct_conversations")
        .select("conversation_id, user1_id, user2_id")
        .or_(f"user1_id.eq.{user_id},user2_id.eq.{user_id}")
        .execute()
    ).data or []

    return {
        str(row["user2_id"] if str(row["user1_id"]) == user_id else row["user1_id"]): str(
            row["conversation_id"]
        )
        for row in rows
    }


def _add_members(db: Client, conversation_id: str, user_ids: Iterable[str]) -> None:
    db.table("conversation_members").insert(
        [
            {"conversation_id": conversation_id, "user_id": str(user_id)}
            for user_id in user_ids
        ]
    ).execute()


def resolve_direct(db: Client, user: dict, other_user_id: str) -> tuple[str, bool]:
    """
    Find or create the 1-on-1 conversation between `user` and another user.

    Returns `(conversation_id, is_new)`. Calling it again with the same pair,
    in either order, returns the same conversation.
    """
    current_user_id = str(user["id"])
    other_user_id = str(other_user_id)

    if current_user_id == other_user_id:
        raise ValidationFailedError("Cannot start a conversation with yourself.")

    if get_profile(db, other_user_id) is None:
        raise NotFoundError("Other user not found.")

    existing_id = find_direct_conversation_id(db, current_user_id, other_user_id)
    if existing_id:
        return existing_id, False

    u1, u2 = canonical_pair(current_user_id, other_user_id)

    convo_res = (
        db.table("conversations")
        .insert({"is_group": False, "created_by": current_user_id})
        .execute()
    )
    conversation_id = str(convo_res.data[0]["id"])

    try:
        _add_members(db, conversation_id, [u1, u2])
        db.table("direct_conversations").insert(
            {"conversation_id": conversation_id, "user1_id": u1, "user2_id": u2}
        ).execute()

    except APIError as error:
        # Members cascade with the conversation row
        db.table("conversations").delete().eq("id", conversation_id).execute()

        if error.code != UNIQUE_VIOLATION:
            logger.exception(f"direct_conversation_rollback conversation_id={conversation_id}")
            raise

        # Another request created the pair first; use theirs
        existing_id = find_direct_conversation_id(db, u1, u2)
        logger.info(f"direct_conversation_race pair={u1},{u2} kept={existing_id}")
        return existing_id, False

    logger.info(f"direct_conversation_created conversation_id={conversation_id}")
    return conversation_id, True


def create_group(
    db: Client, user: dict, participant_ids: Iterable[str], name: Optional[str]
) -> dict:
    """
    Create a named group conversation. Groups are never deduplicated.

    The creator is always a participant; duplicates in `participant_ids` are
    ignored. Fails validation on a blank name or fewer than two participants.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationFailedError("Group name is required.")

    creator_id = str(user["id"])
    members = list(dict.fromkeys([creator_id, *(str(pid) for pid in participant_ids)]))

    if len(members) < 2:
        raise ValidationFailedError("A group needs at least 2 participants.")

    profiles = get_profiles(db, members)
    missing = [member for member in members if member not in profiles]
    if missing:
        raise NotFoundError(f"Users not found: {', '.join(missing)}")

    convo_res = (
        db.table("conversations")
        .insert({"is_group": True, "name": name, "created_by": creator_id})
        .execute()
    )
    conversation = convo_res.data[0]

    try:
        _add_members(db, str(conversation["id"]), members)
    except APIError:
        logger.exception(f"group_conversation_rollback conversation_id={conversation['id']}")
        db.table("conversations").delete().eq("id", conversation["id"]).execute()
        raise

    logger.info(
        f"group_conversation_created conversation_id={conversation['id']} size={len(members)}"
    )
    return _hydrate(conversation, members, creator_id, profiles)


def _hydrate(
    conversation: dict,
    participant_ids: list[str],
    viewer_id: str,
    profiles: dict[str, dict],
) -> dict:
    hydrated = {**conversation, "participant_ids": participant_ids}

    if conversation.get("is_group"):
        hydrated["participants"] = [
            profiles[pid] for pid in participant_ids if pid in profiles
        ]
        hydrated["other_user"] = None
    else:
        other_id = next((pid for pid in participant_ids if pid != viewer_id), None)
        hydrated["participants"] = None
        hydrated["other_user"] = profiles.get(other_id) if other_id else None

    return hydrated


def get_by_id(db: Client, user: dict, conversation_id: str) -> dict:
    conversation, participant_ids = require_participant(db, user, conversation_id)
    profiles = get_profiles(db, participant_ids)
    return _hydrate(conversation, participant_ids, str(user["id"]), profiles)


def list_for_user(db: Client, user: dict) -> list[dict]:
    """
    Every conversation the user belongs to, most recent activity first.

    Direct conversations carry `other_user`, groups leave it empty. Each item
    also has the last message and the viewer's unread count.
    """
    user_id = str(user["id"])

    memberships = (
        db.table("conversation_members")
        .select("conversation_id")
        .eq("user_id", user_id)
        .execute()
    ).data or []
    conversation_ids = [str(row["conversation_id"]) for row in memberships]

    if not conversation_ids:
        return []

    conversations = (
        db.table("conversations").select("*").in_("id", conversation_ids).execute()
    ).data or []

    member_rows = (
        db.table("conversation_members")
        .select("conversation_id, user_id")
        .in_("conversation_id", conversation_ids)
        .execute()
    ).data or []

    participants: dict[str, list[str]] = {}
    for row in member_rows:
        participants.setdefault(str(row["conversation_id"]), []).append(
            str(row["user_id"])
        )

    profiles = get_profiles(
        db, [pid for members in participants.values() for pid in members]
    )

    last_message_ids = [
        str(c["last_message_id"]) for c in conversations if c.get("last_message_id")
    ]
    last_messages = {}
    if last_message_ids:
        rows = (
            db.table("messages").select("*").in_("id", last_message_ids).execute()
        ).data or []
        last_messages = {str(row["id"]): row for row in rows}

    unread = counts_by_conversation(db, user_id)

    items = []
    for conversation in conversations:
        conversation_id = str(conversation["id"])
        item = _hydrate(
            conversation, participants.get(conversation_id, []), user_id, profiles
        )

        item["participants"] = None

        last_message = last_messages.get(str(conversation.get("last_message_id")))
        if last_message and last_message.get("deleted"):
            last_message = {**last_message, "content": ""}

        item["last_message"] = last_message
        item["unread_count"] = unread.get(conversation_id, 0)
        items.append(item)

    items.sort(
        key=lambda c: c["last_message"]["created_at"] if c["last_message"] else 0,
        reverse=True,
    )
    return items

