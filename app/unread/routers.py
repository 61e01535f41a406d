import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user
from app.core.errors import database_error

from . import service
from .schemas import GetUnreadCountsResponseModel, ResetUnreadResponseModel


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/{conversation_id}/reset",
    response_model=ResetUnreadResponseModel,
    status_code=200,
)
def reset_unread_count(
    conversation_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Mark a conversation as read for the authenticated user.

    Called when the user opens a conversation. The badge row is set to zero,
    not deleted. Resetting a conversation that never received messages is a
    no-op and still succeeds.

    **Returns**
    - `conversation_id`
    - `reset`: Whether an existing badge row was zeroed

    **Errors**
    - 401: Unauthorized
    - 403: User is not a member of the conversation
    - 404: Conversation not found
    - 500: Database error
    """
    try:
        was_reset = service.reset(db, user, str(conversation_id))
        return {"conversation_id": conversation_id, "reset": was_reset}

    except HTTPException:
        raise
    except APIError:
        logger.exception("unread_reset_failed")
        raise database_error("Failed to reset unread count.")


@router.get("", response_model=GetUnreadCountsResponseModel, status_code=200)
def get_unread_counts(
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Retrieve every unread badge row of the authenticated user.

    **Returns**
    - `unread`: List of `{user_id, conversation_id, count}`
    """
    try:
        return {"unread": service.list_for_user(db, user["id"])}

    except APIError:
        logger.exception("unread_list_failed")
        raise database_error("Failed to fetch unread counts.")
