from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import StructuralIntegrityError
from ..middleware.logging import get_logger
from .records import ConversationRecord

logger = get_logger()


@dataclass
class BranchGraph:
    """Parent/child index over one owner's conversations."""

    nodes: Dict[str, ConversationRecord]
    children: Dict[str, List[ConversationRecord]] = field(default_factory=dict)
    dangling: List[ConversationRecord] = field(default_factory=list)

    @property
    def roots(self) -> List[ConversationRecord]:
        return [node for node in self.nodes.values() if node.parent_conversation_id is None]

    def children_of(self, conversation_id: str) -> List[ConversationRecord]:
        return self.children.get(conversation_id, [])

    def has_children(self, conversation_id: str) -> bool:
        return bool(self.children.get(conversation_id))


def _check_acyclic(nodes: Dict[str, ConversationRecord]) -> None:
    acyclic: Set[str] = set()
    for start_id in nodes:
        if start_id in acyclic:
            continue
        path: List[str] = []
        visited: Set[str] = set()
        current_id: Optional[str] = start_id
        while current_id is not None and current_id in nodes:
            if current_id in acyclic:
                break
            if current_id in visited:
                cycle = path[path.index(current_id):] + [current_id]
                logger.error(
                    "hierarchy_cycle_detected",
                    conversation_ids=cycle,
                    owner_id=nodes[current_id].owner_id,
                )
                raise StructuralIntegrityError(cycle)
            visited.add(current_id)
            path.append(current_id)
            current_id = nodes[current_id].parent_conversation_id
        acyclic.update(path)


def build_branch_graph(
    records: Iterable[ConversationRecord],
    *,
    owner_id: Optional[int] = None,
) -> BranchGraph:
    """Index records by id and group them under their parents.

    Records whose parent is not among ``records`` end up in ``dangling``.
    When ``owner_id`` is given, records belonging to anyone else are dropped
    first, so a parent owned by another user is treated as missing.

    Raises:
        StructuralIntegrityError: if following parent links revisits a node.
    """
    nodes: Dict[str, ConversationRecord] = {}
    for record in records:
        if owner_id is not None and record.owner_id != owner_id:
            logger.warning(
                "foreign_owner_record_dropped",
                conversation_id=record.id,
                owner_id=owner_id,
            )
            continue
        nodes[record.id] = record

    children: Dict[str, List[ConversationRecord]] = {}
    dangling: List[ConversationRecord] = []
    for record in nodes.values():
        if record.is_branch != (record.parent_conversation_id is not None):
            logger.warning(
                "branch_flag_mismatch",
                conversation_id=record.id,
                is_branch=record.is_branch,
                parent_conversation_id=record.parent_conversation_id,
            )
        parent_id = record.parent_conversation_id
        if parent_id is None:
            continue
        if parent_id in nodes:
            children.setdefault(parent_id, []).append(record)
        else:
            dangling.append(record)

    _check_acyclic(nodes)

    return BranchGraph(nodes=nodes, children=children, dangling=dangling)
