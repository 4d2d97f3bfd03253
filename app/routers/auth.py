"""
Authentication routes
Sign-up and sign-in stay with the auth provider; this only resolves the current user
"""

from fastapi import APIRouter, Depends

from app.schemas.user import CurrentUser
from app.utils.auth import get_current_user

router = APIRouter(prefix="/api/auth", tags=["authentication"])


@router.get("/me", response_model=CurrentUser)
async def get_me(user: CurrentUser = Depends(get_current_user)):
    """Return the signed-in user"""
    return user
