"""
Conversation hierarchy and search routes.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ..branching import clamp_window, resolve_search_filters
from ..database import get_db
from ..schemas.conversation import (
    ConversationRelationshipsResponse,
    ConversationSummary,
    FilterOptionsResponse,
    HierarchyResponse,
    SearchRequest,
    SearchResponse,
)
from ..models.user import User
from ..services.conversation_service import ConversationService
from ..utils.security import get_current_user


router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


@router.get("/hierarchy", response_model=HierarchyResponse)
async def get_conversation_hierarchy(
    limit: Optional[int] = None,
    include_orphaned: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get conversations as roots with their direct branches, for the sidebar."""
    service = ConversationService(db)
    hierarchy = await service.get_hierarchy(current_user.id, limit, include_orphaned)
    return HierarchyResponse.from_hierarchy(hierarchy)


@router.post("/search", response_model=SearchResponse)
async def search_conversations(
    search_request: SearchRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Search conversations with filters, sorting and pagination."""
    date_range = None
    if search_request.date_range is not None:
        date_range = (search_request.date_range.start, search_request.date_range.end)

    filters = resolve_search_filters(
        search_query=search_request.search_query,
        date_range=date_range,
        models=search_request.models,
        tags=search_request.tags,
        sort_by=search_request.sort_by,
        sort_order=search_request.sort_order,
        limit=search_request.limit,
        offset=search_request.offset,
    )

    service = ConversationService(db)
    page = await service.search(current_user.id, filters)
    return SearchResponse.from_page(page)


@router.get("/search", response_model=SearchResponse)
async def quick_search_conversations(
    q: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Simple query-string search; out-of-range windows are clamped."""
    limit, offset = clamp_window(limit, offset)
    filters = resolve_search_filters(
        search_query=q,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )

    service = ConversationService(db)
    page = await service.search(current_user.id, filters)
    return SearchResponse.from_page(page)


@router.get("/filter-options", response_model=FilterOptionsResponse, response_model_exclude_none=True)
async def get_filter_options(
    type: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the models and tags available for search filters."""
    service = ConversationService(db)
    options = await service.get_filter_options(current_user.id, type)
    return FilterOptionsResponse(**options)


@router.get("/{conversation_id}/relationships", response_model=ConversationRelationshipsResponse)
async def get_conversation_relationships(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a conversation with its parent and branch list."""
    service = ConversationService(db)
    relationships = await service.get_relationships(current_user.id, conversation_id)

    if relationships is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found"
        )

    parent = relationships.parent_conversation
    return ConversationRelationshipsResponse(
        conversation=ConversationSummary.model_validate(relationships.conversation),
        parent_conversation=ConversationSummary.model_validate(parent) if parent else None,
        branches=[ConversationSummary.model_validate(b) for b in relationships.branches],
    )
