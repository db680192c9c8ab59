"""
Conversation-related Pydantic schemas.
"""

from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from datetime import datetime


# ============= Hierarchy Schemas =============

class BranchSummary(BaseModel):
    """A direct branch listed under its parent."""
    id: str
    title: str
    branch_name: Optional[str] = None
    branch_order: Optional[int] = None
    branch_created_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    model: Optional[str] = None
    metadata: Dict[str, Any] = {}
    has_children: bool = False

    @classmethod
    def from_entry(cls, entry) -> "BranchSummary":
        record = entry.record
        return cls(
            id=record.id,
            title=record.title,
            branch_name=record.branch_name,
            branch_order=record.branch_order,
            branch_created_at=record.branch_created_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
            model=record.model,
            metadata=record.metadata,
            has_children=entry.has_children,
        )


class HierarchyConversation(BaseModel):
    """Top-level sidebar entry: a root, or an orphaned branch shown on its own."""
    id: str
    title: str
    model: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    is_shared: bool = False
    is_branch: bool = False
    parent_conversation_id: Optional[str] = None
    branch_name: Optional[str] = None
    branch_order: Optional[int] = None
    branch_created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = {}
    has_children: bool = False
    branches: List[BranchSummary] = []

    @classmethod
    def from_entry(cls, entry) -> "HierarchyConversation":
        record = entry.record
        return cls(
            id=record.id,
            title=record.title,
            model=record.model,
            created_at=record.created_at,
            updated_at=record.updated_at,
            is_shared=record.is_shared,
            is_branch=record.is_branch,
            parent_conversation_id=record.parent_conversation_id,
            branch_name=record.branch_name,
            branch_order=record.branch_order,
            branch_created_at=record.branch_created_at,
            metadata=record.metadata,
            has_children=entry.has_children,
            branches=[BranchSummary.from_entry(branch) for branch in entry.branches],
        )


class HierarchyMetadata(BaseModel):
    total: int
    limit: int
    include_orphaned: bool
    parent_conversations: int
    branch_conversations: int


class HierarchyResponse(BaseModel):
    """Hierarchy query response."""
    success: bool = True
    conversations: List[HierarchyConversation]
    metadata: HierarchyMetadata

    @classmethod
    def from_hierarchy(cls, hierarchy) -> "HierarchyResponse":
        return cls(
            conversations=[HierarchyConversation.from_entry(e) for e in hierarchy.entries],
            metadata=HierarchyMetadata(
                total=hierarchy.total,
                limit=hierarchy.limit,
                include_orphaned=hierarchy.include_orphaned,
                parent_conversations=hierarchy.parent_conversations,
                branch_conversations=hierarchy.branch_conversations,
            ),
        )


# ============= Search Schemas =============

class DateRangeFilter(BaseModel):
    start: datetime
    end: datetime


class SearchRequest(BaseModel):
    """Search body. Every field is optional; defaults are applied server-side."""
    search_query: Optional[str] = None
    date_range: Optional[DateRangeFilter] = None
    models: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None


class LastMessage(BaseModel):
    content: str
    created_at: Optional[datetime] = None


class ConversationSearchItem(BaseModel):
    """Schema for a search result row."""
    id: str
    title: str
    description: Optional[str] = None
    model: Optional[str] = None
    is_shared: bool = False
    share_id: Optional[str] = None
    is_branch: bool = False
    parent_conversation_id: Optional[str] = None
    metadata: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime
    message_count: int = 0
    last_message: Optional[LastMessage] = None

    @classmethod
    def from_record(cls, record) -> "ConversationSearchItem":
        last_message = None
        if record.last_message_content:
            last_message = LastMessage(
                content=record.last_message_content,
                created_at=record.last_message_at,
            )
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            model=record.model,
            is_shared=record.is_shared,
            share_id=record.share_id,
            is_branch=record.is_branch,
            parent_conversation_id=record.parent_conversation_id,
            metadata=record.metadata,
            created_at=record.created_at,
            updated_at=record.updated_at,
            message_count=record.message_count,
            last_message=last_message,
        )


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class SearchResponse(BaseModel):
    """Search query response."""
    success: bool = True
    conversations: List[ConversationSearchItem]
    pagination: Pagination

    @classmethod
    def from_page(cls, page) -> "SearchResponse":
        return cls(
            conversations=[ConversationSearchItem.from_record(r) for r in page.items],
            pagination=Pagination(
                total=page.total,
                limit=page.limit,
                offset=page.offset,
                has_more=page.has_more,
            ),
        )


# ============= Filter Options / Relationships =============

class FilterOptionsResponse(BaseModel):
    success: bool = True
    models: Optional[List[str]] = None
    tags: Optional[List[str]] = None


class ConversationSummary(BaseModel):
    """Conversation fields shown in relationship views."""
    id: str
    title: str
    model: Optional[str] = None
    is_branch: bool = False
    parent_conversation_id: Optional[str] = None
    branch_name: Optional[str] = None
    branch_order: Optional[int] = None
    branch_created_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ConversationRelationshipsResponse(BaseModel):
    success: bool = True
    conversation: ConversationSummary
    parent_conversation: Optional[ConversationSummary] = None
    branches: List[ConversationSummary] = []
