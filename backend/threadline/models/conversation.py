"""
Conversation database model.
"""

import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Index, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


def _default_metadata():
    return {"totalMessages": 0, "tags": []}


class Conversation(Base):
    """Conversation, either a root or a branch forked from another conversation."""

    __tablename__ = "conversations"

    # Composite index for faster conversation listing by user ordered by recency
    __table_args__ = (
        Index('ix_conversations_user_updated', 'user_id', 'updated_at'),
        Index('ix_conversations_parent', 'parent_conversation_id', 'branch_order'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(255), nullable=False, default="New Chat")
    description = Column(Text, nullable=True)
    model = Column(String(50), nullable=False, default="gpt-4")

    # Sharing
    is_shared = Column(Boolean, default=False)
    share_id = Column(String(100), unique=True, nullable=True)

    # Branching. No foreign key on the parent: branches may outlive it.
    is_branch = Column(Boolean, default=False, nullable=False)
    parent_conversation_id = Column(String(36), nullable=True)
    branch_point_message_id = Column(String(36), nullable=True)
    branch_name = Column(String(100), nullable=True)
    branch_order = Column(Integer, default=0)
    branch_created_at = Column(DateTime(timezone=True), nullable=True)

    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON, default=_default_metadata)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)

    # Relationships
    user = relationship("User", back_populates="conversations")
    messages = relationship("Message", back_populates="conversation", cascade="all, delete-orphan", order_by="Message.created_at")
