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
    ToggleReactionModel,
    ToggleReactionResponseModel,
    GetReactionsResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=ToggleReactionResponseModel,
    response_model_exclude_none=True,
    status_code=200,
)
def toggle_reaction(
    data: ToggleReactionModel,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Toggle the caller's emoji reaction on a message.

    **Input**
    - `message_id`: UUID of the message
    - `emoji`: One of 👍 ❤️ 😂 😮 😢

    **Returns**
    - `{"added": true}` or `{"removed": true}`

    **Errors**
    - 403: User is not a member of the message's conversation
    - 404: Message not found
    - 422: Unsupported emoji
    """
    try:
        return service.toggle(db, user, str(data.message_id), data.emoji)

    except HTTPException:
        raise
    except APIError:
        logger.exception("reaction_toggle_failed")
        raise database_error("Failed to toggle reaction.")


@router.get(
    "/{message_id}",
    response_model=GetReactionsResponseModel,
    status_code=200,
)
def get_reactions_by_message(
    message_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    All reactions on a message, plus per-emoji counts for the caller.
    """
    try:
        rows = service.list_by_message(db, user, str(message_id))
        return {"reactions": rows, "summary": service.summarize(rows, user["id"])}

    except HTTPException:
        raise
    except APIError:
        logger.exception("reaction_list_failed")
        raise database_error("Failed to fetch reactions.")
