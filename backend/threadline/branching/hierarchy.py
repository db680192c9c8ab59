"""
Assembly of the sidebar hierarchy: top-level conversations, each carrying
its direct branches in display order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence

from .graph import BranchGraph
from .orphans import resolve_orphans
from .records import ConversationRecord


@dataclass(frozen=True)
class BranchEntry:
    record: ConversationRecord
    has_children: bool = False


@dataclass(frozen=True)
class HierarchyEntry:
    record: ConversationRecord
    branches: List[BranchEntry] = field(default_factory=list)
    has_children: bool = False


@dataclass
class Hierarchy:
    entries: List[HierarchyEntry]
    limit: int
    include_orphaned: bool

    @property
    def total(self) -> int:
        return len(self.entries)

    @property
    def parent_conversations(self) -> int:
        return sum(1 for entry in self.entries if not entry.record.is_branch)

    @property
    def branch_conversations(self) -> int:
        return sum(1 for entry in self.entries if entry.record.is_branch)


def order_roots(records: Sequence[ConversationRecord]) -> List[ConversationRecord]:
    """Most recently updated first; ties by id ascending."""
    # Two stable sorts: id ascending survives the descending timestamp sort.
    ordered = sorted(records, key=lambda record: record.id)
    ordered.sort(key=lambda record: record.updated_at, reverse=True)
    return ordered


def _branch_sort_key(record: ConversationRecord):
    created = record.branch_created_at
    return (
        record.branch_order if record.branch_order is not None else 0,
        created is None,
        created if created is not None else datetime.min,
        record.id,
    )


def order_branches(records: Sequence[ConversationRecord]) -> List[ConversationRecord]:
    """Sibling order: branch_order, then fork time, then id."""
    return sorted(records, key=_branch_sort_key)


def assemble_hierarchy(
    graph: BranchGraph,
    limit: int,
    include_orphaned: bool = False,
) -> Hierarchy:
    """Build the top-level window of at most ``limit`` entries.

    True roots and (when ``include_orphaned``) promoted orphans share one
    ordering. The limit is applied before children are looked up, and every
    direct branch of a returned entry is included.
    """
    top_level = graph.roots + resolve_orphans(graph.dangling, include_orphaned)
    window = order_roots(top_level)[:limit]

    entries = []
    for record in window:
        branches = [
            BranchEntry(record=child, has_children=graph.has_children(child.id))
            for child in order_branches(graph.children_of(record.id))
        ]
        entries.append(
            HierarchyEntry(
                record=record,
                branches=branches,
                has_children=bool(branches),
            )
        )

    return Hierarchy(entries=entries, limit=limit, include_orphaned=include_orphaned)
