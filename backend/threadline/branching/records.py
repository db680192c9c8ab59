from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps (SQLite drops tzinfo on read)."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ConversationRecord:
    """Read-only snapshot of one stored conversation.

    The engine works on these instead of ORM rows so nothing it does can
    write back to the store.
    """

    id: str
    owner_id: int
    title: str
    model: Optional[str]
    created_at: datetime
    updated_at: datetime
    is_shared: bool = False
    is_branch: bool = False
    parent_conversation_id: Optional[str] = None
    branch_name: Optional[str] = None
    branch_order: Optional[int] = None
    branch_created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    description: Optional[str] = None
    share_id: Optional[str] = None
    message_count: int = 0
    last_message_content: Optional[str] = None
    last_message_at: Optional[datetime] = None
    # Set by the store when the search term occurs in any message body
    content_match: bool = False

    @property
    def tags(self) -> List[str]:
        tags = (self.metadata or {}).get("tags")
        if not isinstance(tags, list):
            return []
        return [tag for tag in tags if isinstance(tag, str)]
