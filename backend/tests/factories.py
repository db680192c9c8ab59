"""Builders for conversation records and rows used across tests."""
from datetime import datetime, timedelta, timezone

from threadline.branching import ConversationRecord
from threadline.models import Conversation, Message

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """Timestamp ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def make_record(
    id,
    updated=0,
    created=None,
    parent=None,
    order=None,
    branch_created=None,
    owner_id=1,
    title=None,
    **extra,
):
    """Record with branch fields derived from ``parent``."""
    return ConversationRecord(
        id=id,
        owner_id=owner_id,
        title=title or f"Conversation {id}",
        model=extra.pop("model", "gpt-4"),
        created_at=at(created if created is not None else updated),
        updated_at=at(updated),
        is_branch=parent is not None,
        parent_conversation_id=parent,
        branch_name=f"branch-{id}" if parent is not None else None,
        branch_order=order,
        branch_created_at=at(branch_created) if branch_created is not None else None,
        **extra,
    )


def make_conversation(
    id,
    user_id,
    updated=0,
    created=None,
    parent=None,
    order=0,
    title=None,
    model="gpt-4",
    tags=None,
    description=None,
):
    """ORM conversation row with explicit timestamps."""
    return Conversation(
        id=id,
        user_id=user_id,
        title=title or f"Conversation {id}",
        description=description,
        model=model,
        is_branch=parent is not None,
        parent_conversation_id=parent,
        branch_name=f"branch-{id}" if parent is not None else None,
        branch_order=order if parent is not None else 0,
        branch_created_at=at(updated) if parent is not None else None,
        extra_metadata={"totalMessages": 0, "tags": tags or []},
        created_at=at(created if created is not None else updated),
        updated_at=at(updated),
    )


def make_message(conversation_id, user_id, content, minutes=0, role="user"):
    return Message(
        conversation_id=conversation_id,
        user_id=user_id,
        role=role,
        content=content,
        created_at=at(minutes),
    )
