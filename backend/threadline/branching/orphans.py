from __future__ import annotations

from typing import Iterable, List

from ..middleware.logging import get_logger
from .records import ConversationRecord

logger = get_logger()


def resolve_orphans(
    dangling: Iterable[ConversationRecord],
    include_orphaned: bool,
) -> List[ConversationRecord]:
    """Return the dangling branches that should be shown as top-level entries.

    Promoted orphans keep their branch fields and parent id exactly as stored;
    a non-null ``parent_conversation_id`` on a top-level entry is what marks
    it as an orphan.
    """
    orphans = list(dangling)
    if not orphans:
        return []
    if not include_orphaned:
        logger.info("orphans_excluded", count=len(orphans))
        return []
    logger.info(
        "orphans_resolved",
        count=len(orphans),
        conversation_ids=[orphan.id for orphan in orphans],
    )
    return orphans
