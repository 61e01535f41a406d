import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from postgrest.exceptions import APIError
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.dependencies import get_current_user, get_optional_identity
from app.core.errors import AccessDeniedError, database_error

from . import service
from .schemas import (
    SyncUserModel,
    SyncUserResponseModel,
    UpdateStatusModel,
    UpdateStatusResponseModel,
    GetUsersResponseModel,
    GetMeResponseModel,
)


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/sync", response_model=SyncUserResponseModel, status_code=200)
def sync_user(
    data: SyncUserModel,
    identity: Optional[str] = Depends(get_optional_identity),
    db: Client = Depends(get_supabase),
):
    """
    Create or refresh the user record after sign-in with the identity provider.

    Called by the client right after login. A new record is created on first
    sign-in; afterwards the profile fields are refreshed. Either way the user
    is marked online and `last_seen` is set to now.

    **Input Fields**
    - **clerk_id**: The identity provider's subject id
    - **name**, **email**, **image_url**: Profile fields

    **Returns**
    - `user_id`: The internal user id

    **Errors**
    - 403: A bearer token was sent for a different identity
    - 500: Database error
    """
    if identity is not None and identity != data.clerk_id:
        raise AccessDeniedError("Cannot sync another user's profile.")

    try:
        user_id = service.sync_user(
            db, data.clerk_id, data.name, data.email, data.image_url
        )
        return {"user_id": user_id}

    except APIError:
        logger.exception("user_sync_failed")
        raise database_error("Failed to sync user.")


@router.patch("/me/status", response_model=UpdateStatusResponseModel, status_code=200)
def update_status(
    data: UpdateStatusModel,
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    Set the caller's presence flag.

    Clients call this with `online: true` on focus and `online: false` on
    page unload; the unload call is best-effort and may never arrive.
    """
    try:
        return service.update_status(db, user, data.online)

    except APIError:
        logger.exception("user_status_failed")
        raise database_error("Failed to update status.")


@router.get("", response_model=GetUsersResponseModel, status_code=200)
def get_all_users(
    user=Depends(get_current_user),
    db: Client = Depends(get_supabase),
):
    """
    List every other user for the contact list.

    **Returns**
    - `users`: Each with presence, `conversation_id` of the existing direct
      conversation (if any) and `unread_count` for it
    """
    try:
        return {"users": service.list_others(db, user)}

    except HTTPException:
        raise
    except APIError:
        logger.exception("user_list_failed")
        raise database_error("Failed to fetch users.")


@router.get("/me", response_model=GetMeResponseModel, status_code=200)
def get_me(
    identity: Optional[str] = Depends(get_optional_identity),
    db: Client = Depends(get_supabase),
):
    """Current user record, or `null` when signed out or not yet synced."""
    try:
        return {"user": service.get_me(db, identity)}

    except APIError:
        logger.exception("user_me_failed")
        raise database_error("Failed to fetch user.")
