"""
User-related Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Optional


class TokenData(BaseModel):
    """Token payload data."""
    user_id: Optional[int] = None
    username: Optional[str] = None
