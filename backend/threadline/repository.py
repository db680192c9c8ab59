"""
Owner-scoped read access to stored conversations.
"""

from typing import List, Optional, Set

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .branching import (
    ConversationRecord,
    Page,
    SearchFilters,
    apply_filters,
    order_branches,
    paginate,
    sort_conversations,
)
from .branching.records import as_utc
from .exceptions import StoreUnavailableError
from .middleware.logging import get_logger
from .models.conversation import Conversation
from .models.message import Message

logger = get_logger()


def to_record(
    conversation: Conversation,
    message_count: int = 0,
    last_message_content: Optional[str] = None,
    last_message_at=None,
    content_match: bool = False,
) -> ConversationRecord:
    """Snapshot an ORM row into an immutable engine record."""
    return ConversationRecord(
        id=conversation.id,
        owner_id=conversation.user_id,
        title=conversation.title,
        model=conversation.model,
        created_at=as_utc(conversation.created_at),
        updated_at=as_utc(conversation.updated_at),
        is_shared=bool(conversation.is_shared),
        is_branch=bool(conversation.is_branch),
        parent_conversation_id=conversation.parent_conversation_id,
        branch_name=conversation.branch_name,
        branch_order=conversation.branch_order,
        branch_created_at=as_utc(conversation.branch_created_at),
        metadata=dict(conversation.extra_metadata or {}),
        description=conversation.description,
        share_id=conversation.share_id,
        message_count=message_count or 0,
        last_message_content=last_message_content,
        last_message_at=as_utc(last_message_at),
        content_match=bool(content_match),
    )


class ConversationRepository:
    """Read-only queries over one user's conversations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, statement):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            logger.error("store_query_failed", error=str(e), error_type=type(e).__name__)
            raise StoreUnavailableError("Conversation store query failed") from e

    async def fetch_user_conversations_with_branching(self, owner_id: int) -> List[ConversationRecord]:
        """Every conversation of the owner, with branch fields.

        The whole set is returned because orphan detection needs to see
        which parents exist; the hierarchy window is cut afterwards.
        """
        result = await self._execute(
            select(Conversation).filter(Conversation.user_id == owner_id)
        )
        return [to_record(conversation) for conversation in result.scalars().all()]

    async def fetch_search_candidates(
        self,
        owner_id: int,
        search_query: Optional[str] = None,
    ) -> List[ConversationRecord]:
        """Owner's conversations with message count, last message and content match."""
        message_count = (
            select(func.count(Message.id))
            .where(Message.conversation_id == Conversation.id)
            .correlate(Conversation)
            .scalar_subquery()
        )
        last_message = (
            select(Message.content)
            .where(Message.conversation_id == Conversation.id)
            .order_by(Message.created_at.desc())
            .limit(1)
            .correlate(Conversation)
            .scalar_subquery()
        )
        last_message_at = (
            select(Message.created_at)
            .where(Message.conversation_id == Conversation.id)
            .order_by(Message.created_at.desc())
            .limit(1)
            .correlate(Conversation)
            .scalar_subquery()
        )
        columns = [
            Conversation,
            message_count.label("message_count"),
            last_message.label("last_message_content"),
            last_message_at.label("last_message_at"),
        ]

        result = await self._execute(
            select(*columns).filter(Conversation.user_id == owner_id)
        )
        rows = result.all()

        term = search_query.strip().casefold() if search_query else ""
        matched_ids = await self._content_matches(owner_id, term) if term else set()

        records = []
        for row in rows:
            records.append(
                to_record(
                    row[0],
                    message_count=row.message_count,
                    last_message_content=row.last_message_content,
                    last_message_at=row.last_message_at,
                    content_match=row[0].id in matched_ids,
                )
            )
        return records

    async def _content_matches(self, owner_id: int, term: str) -> Set[str]:
        """Ids of the owner's conversations with a message containing ``term``.

        Folding happens in Python so message bodies match the same way
        titles do; SQLite's ``lower()`` only folds ASCII.
        """
        result = await self._execute(
            select(Message.conversation_id, Message.content)
            .join(Conversation, Conversation.id == Message.conversation_id)
            .filter(Conversation.user_id == owner_id)
        )
        return {
            conversation_id
            for conversation_id, content in result.all()
            if content and term in content.casefold()
        }

    async def search_user_conversations(self, owner_id: int, filters: SearchFilters) -> Page[ConversationRecord]:
        """Filter, sort and window the owner's conversations."""
        candidates = await self.fetch_search_candidates(owner_id, filters.search_query)
        matched = apply_filters(candidates, filters)
        ordered = sort_conversations(matched, filters.sort_by, filters.sort_order)
        return paginate(ordered, filters.limit, filters.offset)

    async def get_conversation(self, owner_id: int, conversation_id: str) -> Optional[ConversationRecord]:
        result = await self._execute(
            select(Conversation).filter(
                Conversation.id == conversation_id,
                Conversation.user_id == owner_id
            )
        )
        conversation = result.scalar_one_or_none()
        return to_record(conversation) if conversation else None

    async def get_conversation_branches(self, owner_id: int, parent_id: str) -> List[ConversationRecord]:
        """Direct branches of a conversation in sibling order."""
        result = await self._execute(
            select(Conversation).filter(
                Conversation.parent_conversation_id == parent_id,
                Conversation.user_id == owner_id
            )
        )
        return order_branches([to_record(c) for c in result.scalars().all()])

    async def get_user_models(self, owner_id: int) -> List[str]:
        """Distinct models used by the owner, alphabetically."""
        result = await self._execute(
            select(Conversation.model)
            .filter(Conversation.user_id == owner_id)
            .distinct()
            .order_by(Conversation.model)
        )
        return [model for model in result.scalars().all() if model]

    async def get_user_tags(self, owner_id: int) -> List[str]:
        """Distinct tags found in the owner's conversation metadata."""
        result = await self._execute(
            select(Conversation.extra_metadata).filter(Conversation.user_id == owner_id)
        )
        tags = set()
        for metadata in result.scalars().all():
            values = (metadata or {}).get("tags")
            if isinstance(values, list):
                tags.update(tag for tag in values if isinstance(tag, str))
        return sorted(tags)
