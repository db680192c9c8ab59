"""
Database models package.
"""

from .user import User
from .conversation import Conversation
from .message import Message

__all__ = ["User", "Conversation", "Message"]
