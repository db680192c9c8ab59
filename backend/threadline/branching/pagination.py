from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


def paginate(items: Sequence[T], limit: int, offset: int) -> Page[T]:
    """Slice ``[offset, offset + limit)`` out of an already sorted sequence."""
    return Page(
        items=list(items[offset:offset + limit]),
        total=len(items),
        limit=limit,
        offset=offset,
    )
