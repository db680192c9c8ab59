"""
Read-side engine that turns one owner's conversations into a branch
hierarchy or a filtered, paginated listing.
"""

from .records import ConversationRecord
from .graph import BranchGraph, build_branch_graph
from .orphans import resolve_orphans
from .hierarchy import (
    BranchEntry,
    Hierarchy,
    HierarchyEntry,
    assemble_hierarchy,
    order_branches,
    order_roots,
)
from .filters import (
    DateRange,
    SearchFilters,
    apply_filters,
    clamp_window,
    resolve_hierarchy_limit,
    resolve_search_filters,
    sort_conversations,
)
from .pagination import Page, paginate

__all__ = [
    "ConversationRecord",
    "BranchGraph",
    "build_branch_graph",
    "resolve_orphans",
    "BranchEntry",
    "Hierarchy",
    "HierarchyEntry",
    "assemble_hierarchy",
    "order_branches",
    "order_roots",
    "DateRange",
    "SearchFilters",
    "apply_filters",
    "clamp_window",
    "resolve_hierarchy_limit",
    "resolve_search_filters",
    "sort_conversations",
    "Page",
    "paginate",
]
