import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user
from app.core.errors import database_error

from . import service
from .schemas import (
    CreateConversationModel,
    CreateConversationResponseModel,
    CreateGroupConversationModel,
    ConversationData,
    GetConversationsResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=CreateConversationResponseModel,
    status_code=200,
)
def create_or_get_conversation(
    data: CreateConversationModel,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Get or create a direct (1-on-1) conversation, or create a group.

    Used when a user clicks another user in the sidebar. If a direct
    conversation between the two users already exists it is returned,
    whichever of the two asks. Sending `is_group: true` with
    `participant_ids` and `name` creates a new group instead.

    **Input**
    - `other_user_id`: UUID of the user to message (direct)
    - `participant_ids`, `is_group`, `name`: group creation

    **Returns**
    - `conversation_id`: UUID of the conversation
    - `is_new`: Whether the conversation was newly created
    - `conversation`: The hydrated group (groups only)

    **Errors**
    - 401: Unauthorized
    - 404: Other user not found
    - 422: Messaging yourself, blank group name, too few participants
    - 500: Database error
    """
    try:
        if data.is_group:
            conversation = service.create_group(
                db, user, data.participant_ids, data.name
            )
            return {
                "conversation_id": conversation["id"],
                "is_new": True,
                "conversation": conversation,
            }

        conversation_id, is_new = service.resolve_direct(db, user, data.other_user_id)
        return {"conversation_id": conversation_id, "is_new": is_new}

    except HTTPException:
        raise
    except APIError:
        logger.exception("conversation_create_failed")
        raise database_error("Failed to create or fetch conversation.")


@router.post(
    "/group",
    response_model=ConversationData,
    status_code=201,
)
def create_group_conversation(
    data: CreateGroupConversationModel,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Create a named group conversation.

    The creator is always added as a participant and duplicate ids are
    ignored. Every call creates a new group, even with the same members.

    **Input**
    - `participant_ids`: UUIDs of the other members
    - `name`: Group name (leading/trailing whitespace is stripped)

    **Errors**
    - 401: Unauthorized
    - 404: A participant does not exist
    - 422: Blank name or fewer than 2 participants including the creator
    - 500: Database error
    """
    try:
        return service.create_group(db, user, data.participant_ids, data.name)

    except HTTPException:
        raise
    except APIError:
        logger.exception("group_create_failed")
        raise database_error("Failed to create group conversation.")


@router.get(
    "",
    response_model=GetConversationsResponseModel,
    status_code=200,
)
def get_conversations(
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Retrieve all conversations for the authenticated user.

    Membership is determined via the `conversation_members` table. The result
    populates the chat sidebar, most recently active first.

    **Returns**
    - `conversations`: List of conversation objects with `other_user`
      (direct chats), `last_message` and `unread_count`
    """
    try:
        return {"conversations": service.list_for_user(db, user)}

    except APIError:
        logger.exception("conversation_list_failed")
        raise database_error("Failed to fetch conversations")


@router.get(
    "/{conversation_id}",
    response_model=ConversationData,
    status_code=200,
)
def get_conversation_by_id(
    conversation_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Retrieve one conversation with its participants.

    Direct chats include the other participant's profile as `other_user`;
    groups include every participant's profile as `participants`.

    **Errors**
    - 401: Invalid or expired authentication token
    - 403: User is not a member of the conversation
    - 404: Conversation does not exist
    - 500: Database error
    """
    try:
        return service.get_by_id(db, user, str(conversation_id))

    except HTTPException:
        raise
    except APIError:
        logger.exception("conversation_fetch_failed")
        raise database_error("Failed to retrieve conversation")
