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
    SendMessageModel,
    SendMessageResponseModel,
    GetMessagesResponseModel,
    DeleteMessageResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "",
    response_model=SendMessageResponseModel,
    status_code=201,
)
def send_message(
    data: SendMessageModel,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Send a message to an existing conversation.

    Messages are always sent to conversations, never directly to users.
    Sending moves the conversation's last-message pointer and adds one to the
    unread badge of every other participant.

    **Input**
    - `conversation_id`: UUID of the conversation
    - `content`: Message text (surrounding whitespace is stripped)

    **Returns**
    - `message_id`: UUID of the new message

    **Errors**
    - 401: Unauthorized
    - 403: User is not a member of the conversation
    - 404: Conversation not found
    - 422: Blank content
    - 500: Database error
    """
    try:
        message_id = service.send(
            db, user, str(data.conversation_id), data.content
        )
        return {"message_id": message_id}

    except HTTPException:
        raise
    except APIError:
        logger.exception("message_send_failed")
        raise database_error("Failed to send message.")


@router.get(
    "/{conversation_id}",
    response_model=GetMessagesResponseModel,
    status_code=200,
)
def get_messages(
    conversation_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Retrieve all messages for a conversation.

    Returns the full message history ordered from oldest to newest, including
    deleted messages (flagged `deleted`, content blanked) so the client can
    render a placeholder.

    **Errors**
    - 401: Invalid or expired authentication token
    - 403: User is not a member of the conversation
    - 404: Conversation does not exist
    - 500: Database error
    """
    try:
        return {"messages": service.list_messages(db, user, str(conversation_id))}

    except HTTPException:
        raise
    except APIError:
        logger.exception("message_list_failed")
        raise database_error("Failed to retrieve messages")


@router.delete(
    "/{message_id}",
    response_model=DeleteMessageResponseModel,
    status_code=200,
)
def delete_message(
    message_id: UUID,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Soft-delete a message. Only its sender may do this.

    **Errors**
    - 403: Caller is not the sender
    - 404: Message not found
    """
    try:
        return {"deleted": service.soft_delete(db, user, str(message_id))}

    except HTTPException:
        raise
    except APIError:
        logger.exception("message_delete_failed")
        raise database_error("Failed to delete message.")
