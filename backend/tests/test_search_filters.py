"""Tests for search filter resolution, filtering, sorting and pagination."""
from datetime import datetime, timezone

import pytest

from threadline.branching import (
    apply_filters,
    clamp_window,
    paginate,
    resolve_search_filters,
    sort_conversations,
)
from threadline.branching.filters import resolve_hierarchy_limit
from threadline.exceptions import InvalidQueryError

from factories import at, make_record


def _search(records, **params):
    filters = resolve_search_filters(**params)
    ordered = sort_conversations(apply_filters(records, filters), filters.sort_by, filters.sort_order)
    return paginate(ordered, filters.limit, filters.offset)


def test_defaults_are_applied():
    """Test that an empty request resolves to updated/desc, 20, 0."""
    filters = resolve_search_filters()

    assert filters.sort_by == "updated"
    assert filters.sort_order == "desc"
    assert filters.limit == 20
    assert filters.offset == 0
    assert filters.search_query is None
    assert filters.models == frozenset()
    assert filters.tags == frozenset()


@pytest.mark.parametrize("limit", [0, 101, -1, -100])
def test_out_of_range_limit_rejected(limit):
    """Test that limits outside 1..100 are rejected, naming the field."""
    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(limit=limit)

    assert excinfo.value.field == "limit"


@pytest.mark.parametrize("limit", [1, 100])
def test_boundary_limits_accepted(limit):
    """Test that the inclusive bounds are accepted."""
    assert resolve_search_filters(limit=limit).limit == limit


def test_negative_offset_rejected():
    """Test that a negative offset is rejected."""
    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(offset=-1)

    assert excinfo.value.field == "offset"


@pytest.mark.parametrize("field,value", [("limit", True), ("offset", 2 ** 40), ("limit", "10")])
def test_unrepresentable_window_values_rejected(field, value):
    """Test that non-integers and out-of-range integers are rejected."""
    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(**{field: value})

    assert excinfo.value.field == field


def test_unknown_sort_key_rejected():
    """Test that only date/title/messages/updated are accepted."""
    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(sort_by="relevance")

    assert excinfo.value.field == "sort_by"

    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(sort_order="sideways")

    assert excinfo.value.field == "sort_order"


def test_inverted_date_range_rejected():
    """Test that a date range whose start is after its end is rejected."""
    with pytest.raises(InvalidQueryError) as excinfo:
        resolve_search_filters(date_range=(at(10), at(5)))

    assert excinfo.value.field == "date_range"


def test_clamp_window():
    """Test the lenient window used by query-string search."""
    assert clamp_window(None, None) == (20, 0)
    assert clamp_window(500, -3) == (100, 0)
    assert clamp_window(0, 7) == (1, 7)


def test_hierarchy_limit_defaults_and_bounds():
    """Test hierarchy limit defaulting and validation."""
    assert resolve_hierarchy_limit(None) == 50
    assert resolve_hierarchy_limit(5) == 5
    with pytest.raises(InvalidQueryError):
        resolve_hierarchy_limit(0)


def test_title_sort_window_scenario():
    """Test title ascending, limit 2, offset 1 over five titles."""
    titles = ["Alpha", "Beta", "Gamma", "Delta", "Echo"]
    records = [make_record(f"c{i}", updated=i, title=title) for i, title in enumerate(titles)]

    page = _search(records, sort_by="title", sort_order="asc", limit=2, offset=1)

    assert [record.title for record in page.items] == ["Beta", "Delta"]
    assert page.total == 5
    assert page.has_more is True


def test_pages_concatenate_to_full_listing():
    """Test that consecutive pages cover the sorted list with no gaps or duplicates."""
    records = [make_record(f"c{i:02d}", updated=i % 4) for i in range(23)]
    full = sort_conversations(records)

    collected = []
    offset = 0
    while True:
        page = _search(records, limit=5, offset=offset)
        collected.extend(page.items)
        if not page.has_more:
            break
        offset += 5

    assert collected == full
    assert offset == 20
    assert len(page.items) == 3


def test_has_more_false_on_exact_last_page():
    """Test has_more when the last page is full."""
    records = [make_record(f"c{i}") for i in range(4)]

    assert _search(records, limit=2, offset=0).has_more is True
    assert _search(records, limit=2, offset=2).has_more is False
    assert _search(records, limit=2, offset=10).items == []


def test_query_matches_title_description_and_content():
    """Test case-insensitive matching on title, description and message content."""
    records = [
        make_record("t", title="Python Tips"),
        make_record("d", title="Misc", description="notes about PYTHON"),
        make_record("m", title="Chat", content_match=True),
        make_record("n", title="Rust"),
    ]

    page = _search(records, search_query="  python ", sort_by="title", sort_order="asc")

    assert [record.id for record in page.items] == ["m", "d", "t"]


def test_date_range_follows_sort_key():
    """Test that the date range uses updated_at for 'updated' and created_at otherwise."""
    record = make_record("x", created=0, updated=100)
    window = (at(50), at(150))

    assert _search([record], date_range=window, sort_by="updated").total == 1
    assert _search([record], date_range=window, sort_by="date").total == 0


def test_date_range_is_inclusive():
    """Test that both ends of the date range are included."""
    records = [make_record("lo", created=10), make_record("hi", created=20), make_record("out", created=21)]

    page = _search(records, date_range=(at(10), at(20)), sort_by="date", sort_order="asc")

    assert [record.id for record in page.items] == ["lo", "hi"]


def test_naive_date_range_compares_as_utc():
    """Test that naive bounds are read as UTC."""
    record = make_record("x", created=0)
    start = datetime(2024, 1, 1, 11, 0)
    end = datetime(2024, 1, 1, 13, 0)

    assert _search([record], date_range=(start, end), sort_by="date").total == 1
    assert record.created_at.tzinfo == timezone.utc


def test_model_and_tag_filters():
    """Test model membership and tag overlap; empty sets do not restrict."""
    records = [
        make_record("a", model="gpt-4", metadata={"tags": ["work"]}),
        make_record("b", model="claude", metadata={"tags": ["home", "work"]}),
        make_record("c", model="claude", metadata={"tags": []}),
        make_record("d", model="llama", metadata={}),
    ]

    assert _search(records, models=["claude"]).total == 2
    assert _search(records, tags=["work"]).total == 2
    assert _search(records, models=["claude"], tags=["work"]).items[0].id == "b"
    assert _search(records, models=[], tags=[]).total == 4


def test_message_sort_breaks_ties_by_id():
    """Test sorting by message count with id ascending as tie-break in both directions."""
    records = [
        make_record("b", message_count=3),
        make_record("a", message_count=3),
        make_record("c", message_count=1),
    ]

    desc = sort_conversations(records, "messages", "desc")
    asc = sort_conversations(records, "messages", "asc")

    assert [record.id for record in desc] == ["a", "b", "c"]
    assert [record.id for record in asc] == ["c", "a", "b"]
