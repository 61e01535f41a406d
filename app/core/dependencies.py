import os
import logging
from typing import Optional

import jwt
from dotenv import load_dotenv
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client

from app.core.supabase_client import get_supabase
from app.core.errors import UnauthenticatedError, NotFoundError
from app.utils.env_helper import env_none_or_str

load_dotenv()
logger = logging.getLogger(__name__)

# auto_error is off so a missing header maps to our own 401
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    issuer = env_none_or_str("AUTH_JWT_ISSUER") or None

    try:
        return jwt.decode(
            token,
            os.getenv("AUTH_JWT_SECRET"),
            algorithms=["HS256"],
            issuer=issuer,
            options={"verify_aud": False},
            leeway=60,
        )

    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")

    except jwt.InvalidTokenError as e:
        logger.warning(f"jwt_verification_failed error={e}")
        raise UnauthenticatedError("Invalid token")


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    if credentials is None:
        raise UnauthenticatedError()

    payload = decode_token(credentials.credentials)

    if not payload.get("sub"):
        raise UnauthenticatedError("Token has no subject")

    return payload


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """The caller's identity-provider id, or None when no token was sent."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials).get("sub")


def find_user_by_identity(db: Client, identity_id: str) -> Optional[dict]:
    response = (
        db.table("users").select("*").eq("clerk_id", identity_id).limit(1).execute()
    )
    return response.data[0] if response.data else None


def get_current_user(
    payload: dict = Depends(verify_token),
    db: Client = Depends(get_supabase),
) -> dict:
    """Resolve the token subject to the caller's row in `users`."""
    user = find_user_by_identity(db, payload["sub"])

    if user is None:
        raise NotFoundError("User not found")

    return user
