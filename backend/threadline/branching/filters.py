"""
Search filters for the flat conversation listing.

``resolve_search_filters`` is the one place defaults are applied and query
parameters are validated; everything downstream receives a complete
``SearchFilters``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from ..exceptions import InvalidQueryError
from .records import ConversationRecord, as_utc

SORT_KEYS = ("date", "title", "messages", "updated")
SORT_ORDERS = ("asc", "desc")

DEFAULT_SORT_BY = "updated"
DEFAULT_SORT_ORDER = "desc"

# Largest limit/offset the store accepts (signed 32-bit)
MAX_WINDOW_VALUE = 2 ** 31 - 1


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return as_utc(self.start) <= as_utc(moment) <= as_utc(self.end)


@dataclass(frozen=True)
class SearchFilters:
    search_query: Optional[str] = None
    date_range: Optional[DateRange] = None
    models: FrozenSet[str] = field(default_factory=frozenset)
    tags: FrozenSet[str] = field(default_factory=frozenset)
    sort_by: str = DEFAULT_SORT_BY
    sort_order: str = DEFAULT_SORT_ORDER
    limit: int = settings.SEARCH_DEFAULT_LIMIT
    offset: int = 0

    @property
    def date_field(self) -> str:
        return "updated_at" if self.sort_by == "updated" else "created_at"


def _check_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQueryError(name, "must be an integer")
    if abs(value) > MAX_WINDOW_VALUE:
        raise InvalidQueryError(name, "is outside the representable range")
    return value


def _normalize_set(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    return frozenset(value for value in values if value)


def resolve_search_filters(
    search_query: Optional[str] = None,
    date_range: Optional[Tuple[datetime, datetime]] = None,
    models: Optional[Iterable[str]] = None,
    tags: Optional[Iterable[str]] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
) -> SearchFilters:
    """Apply defaults and validate search parameters.

    Raises:
        InvalidQueryError: naming the first offending field.
    """
    sort_by = sort_by or DEFAULT_SORT_BY
    if sort_by not in SORT_KEYS:
        raise InvalidQueryError("sort_by", f"must be one of {', '.join(SORT_KEYS)}")

    sort_order = sort_order or DEFAULT_SORT_ORDER
    if sort_order not in SORT_ORDERS:
        raise InvalidQueryError("sort_order", "must be 'asc' or 'desc'")

    limit = settings.SEARCH_DEFAULT_LIMIT if limit is None else _check_int("limit", limit)
    if not 1 <= limit <= settings.SEARCH_MAX_LIMIT:
        raise InvalidQueryError(
            "limit", f"must be between 1 and {settings.SEARCH_MAX_LIMIT}"
        )

    offset = 0 if offset is None else _check_int("offset", offset)
    if offset < 0:
        raise InvalidQueryError("offset", "must not be negative")

    resolved_range = None
    if date_range is not None:
        start, end = date_range
        if as_utc(start) > as_utc(end):
            raise InvalidQueryError("date_range", "start must not be after end")
        resolved_range = DateRange(start=start, end=end)

    query = search_query.strip() if search_query else None

    return SearchFilters(
        search_query=query or None,
        date_range=resolved_range,
        models=_normalize_set(models),
        tags=_normalize_set(tags),
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
    )


def resolve_hierarchy_limit(limit: Optional[int]) -> int:
    """Default and validate the number of top-level hierarchy entries."""
    if limit is None:
        return settings.HIERARCHY_DEFAULT_LIMIT
    limit = _check_int("limit", limit)
    if limit < 1:
        raise InvalidQueryError("limit", "must be at least 1")
    return limit


def clamp_window(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    """Lenient window for query-string searches: clamp instead of rejecting."""
    limit = settings.SEARCH_DEFAULT_LIMIT if limit is None else limit
    offset = 0 if offset is None else offset
    limit = max(1, min(limit, settings.SEARCH_MAX_LIMIT))
    offset = max(0, min(offset, MAX_WINDOW_VALUE))
    return limit, offset


def matches_query(record: ConversationRecord, query: Optional[str]) -> bool:
    if not query:
        return True
    needle = query.casefold()
    if needle in (record.title or "").casefold():
        return True
    if needle in (record.description or "").casefold():
        return True
    return record.content_match


def apply_filters(
    records: Iterable[ConversationRecord],
    filters: SearchFilters,
) -> List[ConversationRecord]:
    """Text, date range, model and tag filters, in that order."""
    matched = [record for record in records if matches_query(record, filters.search_query)]

    if filters.date_range is not None:
        matched = [
            record for record in matched
            if filters.date_range.contains(getattr(record, filters.date_field))
        ]

    if filters.models:
        matched = [record for record in matched if record.model in filters.models]

    if filters.tags:
        matched = [record for record in matched if filters.tags.intersection(record.tags)]

    return matched


_SORT_VALUES = {
    "date": lambda record: record.created_at,
    "updated": lambda record: record.updated_at,
    "title": lambda record: (record.title or "").casefold(),
    "messages": lambda record: record.message_count,
}


def sort_conversations(
    records: Sequence[ConversationRecord],
    sort_by: str = DEFAULT_SORT_BY,
    sort_order: str = DEFAULT_SORT_ORDER,
) -> List[ConversationRecord]:
    """Sort by the requested key; ties always fall back to id ascending."""
    ordered = sorted(records, key=lambda record: record.id)
    ordered.sort(key=_SORT_VALUES[sort_by], reverse=sort_order == "desc")
    return ordered
