"""
Current-user resolution through Supabase Auth
"""

import logging
from typing import Any, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from app.db.client import get_supabase_client
from app.schemas.user import CurrentUser
from app.utils.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def user_from_auth_response(user: Any) -> CurrentUser:
    """Map a Supabase auth user onto CurrentUser; name falls back to the email local part"""
    metadata = getattr(user, "user_metadata", None) or {}
    email = getattr(user, "email", None)
    name = metadata.get("name") or metadata.get("full_name")
    if not name and email:
        name = email.split("@")[0]
    return CurrentUser(id=str(user.id), name=name, email=email)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    supabase: Client = Depends(get_supabase_client),
) -> CurrentUser:
    """
    FastAPI dependency resolving the bearer token to the signed-in user

    Raises:
        AuthenticationError: missing, invalid or expired token
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")

    try:
        response = supabase.auth.get_user(credentials.credentials)
    except Exception as e:
        logger.warning(f"[AUTH][CURRENT-USER] Token rejected: {str(e)}")
        raise AuthenticationError("Invalid or expired session. Please sign in again.") from e

    if response is None or response.user is None:
        raise AuthenticationError("Invalid or expired session. Please sign in again.")

    return user_from_auth_response(response.user)
