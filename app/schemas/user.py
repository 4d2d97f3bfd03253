"""
User schemas
"""

from pydantic import BaseModel
from typing import Optional


class CurrentUser(BaseModel):
    """
    Authenticated user as resolved from the auth provider
    """
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
