import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user
from app.core.errors import database_error

from . import service
from .schemas import SetTypingResponseModel, TypingIndicatorResponseModel


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/{conversation_id}",
    response_model=SetTypingResponseModel,
    status_code=200,
)
def set_typing(
    conversation_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Signal that the caller is typing in a conversation.

    Clients call this on keystrokes. The marker lives for a few seconds
    (`TYPING_TTL_MS`, 3000 by default) unless renewed.
    """
    try:
        expires_at = service.set_typing(db, user, str(conversation_id))
        return {"conversation_id": conversation_id, "expires_at": expires_at}

    except HTTPException:
        raise
    except APIError:
        logger.exception("typing_set_failed")
        raise database_error("Failed to update typing state.")


@router.get(
    "/{conversation_id}",
    response_model=TypingIndicatorResponseModel,
    status_code=200,
)
def get_typing_indicator(
    conversation_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Who else is typing, as display text.

    **Returns**
    - `indicator`: `null`, `"Alice"`, `"Alice and Bob"` or
      `"Alice, Bob and 2 more"`
    """
    try:
        return {"indicator": service.get_indicator(db, user, str(conversation_id))}

    except HTTPException:
        raise
    except APIError:
        logger.exception("typing_indicator_failed")
        raise database_error("Failed to read typing state.")
