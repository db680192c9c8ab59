"""
Conversation hierarchy and search service.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..branching import (
    ConversationRecord,
    Hierarchy,
    Page,
    SearchFilters,
    assemble_hierarchy,
    build_branch_graph,
    resolve_hierarchy_limit,
)
from ..exceptions import InvalidQueryError
from ..middleware.logging import get_logger
from ..repository import ConversationRepository

logger = get_logger()

FILTER_OPTION_TYPES = ("models", "tags", "all")


@dataclass
class ConversationRelationships:
    """A conversation with its parent and the branch list shown next to it."""
    conversation: ConversationRecord
    parent_conversation: Optional[ConversationRecord] = None
    branches: List[ConversationRecord] = field(default_factory=list)


class ConversationService:
    """Service for read-side conversation hierarchy and search."""

    def __init__(self, db: AsyncSession):
        self.repository = ConversationRepository(db)

    async def get_hierarchy(
        self,
        owner_id: int,
        limit: Optional[int] = None,
        include_orphaned: bool = False,
    ) -> Hierarchy:
        """Build the owner's root/branch hierarchy for the sidebar."""
        limit = resolve_hierarchy_limit(limit)

        records = await self.repository.fetch_user_conversations_with_branching(owner_id)
        graph = build_branch_graph(records, owner_id=owner_id)
        hierarchy = assemble_hierarchy(graph, limit, include_orphaned)

        logger.info(
            "hierarchy_assembled",
            owner_id=owner_id,
            fetched=len(records),
            entries=hierarchy.total,
            dangling=len(graph.dangling),
            include_orphaned=include_orphaned,
        )
        return hierarchy

    async def search(self, owner_id: int, filters: SearchFilters) -> Page[ConversationRecord]:
        """Flat filtered listing. Orphan policy does not apply here."""
        page = await self.repository.search_user_conversations(owner_id, filters)
        logger.info(
            "conversations_searched",
            owner_id=owner_id,
            total=page.total,
            returned=len(page.items),
            sort_by=filters.sort_by,
            sort_order=filters.sort_order,
        )
        return page

    async def get_filter_options(self, owner_id: int, option_type: Optional[str]) -> Dict[str, List[str]]:
        """Models and/or tags the owner can filter on."""
        if option_type not in FILTER_OPTION_TYPES:
            raise InvalidQueryError("type", "must be 'models', 'tags', or 'all'")

        options: Dict[str, List[str]] = {}
        if option_type in ("models", "all"):
            options["models"] = await self.repository.get_user_models(owner_id)
        if option_type in ("tags", "all"):
            options["tags"] = await self.repository.get_user_tags(owner_id)
        return options

    async def get_relationships(self, owner_id: int, conversation_id: str) -> Optional[ConversationRelationships]:
        """Parent and branches of one conversation.

        A root lists its own branches; a branch lists its siblings. A parent
        that is missing or owned by someone else is reported as None.
        """
        conversation = await self.repository.get_conversation(owner_id, conversation_id)
        if conversation is None:
            return None

        parent_id = conversation.parent_conversation_id
        if parent_id is None:
            branches = await self.repository.get_conversation_branches(owner_id, conversation.id)
            return ConversationRelationships(conversation=conversation, branches=branches)

        parent = await self.repository.get_conversation(owner_id, parent_id)
        siblings = await self.repository.get_conversation_branches(owner_id, parent_id)
        return ConversationRelationships(
            conversation=conversation,
            parent_conversation=parent,
            branches=siblings,
        )
