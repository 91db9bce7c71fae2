"""
Tests for the review merger.
"""

from dataclasses import replace

from review_relay.domain import merge, new_review_ids
from tests.helpers import make_review

NOW = "2025-05-05T12:00:00+00:00"


def test_new_review_defaults_status_and_date_added():
    """Unseen ids arrive as new with a fresh dateAdded, whatever they carried."""
    incoming = [make_review("1", status="published", date_added="1999-01-01T00:00:00+00:00")]

    merged = merge([], incoming, now=NOW)

    assert len(merged) == 1
    assert merged[0].status == "new"
    assert merged[0].date_added == NOW


def test_known_review_keeps_operator_fields():
    """A published review stays published when it is fetched again."""
    existing = [make_review("1700000000", status="published", date_added="2024-01-01T00:00:00+00:00")]
    incoming = [make_review("1700000000", status="new", text="Edited text", rating=4, date_added=NOW)]

    merged = merge(existing, incoming, now=NOW)

    assert len(merged) == 1
    assert merged[0].status == "published"
    assert merged[0].date_added == "2024-01-01T00:00:00+00:00"
    assert merged[0].text == "Edited text"
    assert merged[0].rating == 4


def test_known_review_with_missing_fields_gets_defaults():
    existing = [make_review("1", status="", date_added="")]

    merged = merge(existing, [make_review("1")], now=NOW)

    assert merged[0].status == "new"
    assert merged[0].date_added == NOW


def test_merge_is_additive():
    """Stored reviews that were not re-fetched survive."""
    existing = [make_review("1"), make_review("2", status="unpublished")]

    merged = merge(existing, [make_review("3")], now=NOW)

    assert [r.id for r in merged] == ["1", "2", "3"]
    assert merged[1].status == "unpublished"


def test_merge_is_idempotent():
    existing = [make_review("1", status="published")]
    incoming = [make_review("1", text="new text"), make_review("2")]

    once = merge(existing, incoming, now=NOW)
    twice = merge(once, incoming, now=NOW)

    assert [r.to_dict() for r in once] == [r.to_dict() for r in twice]
    assert len({r.id for r in twice}) == len(twice)


def test_merge_does_not_mutate_inputs():
    existing = [make_review("1", status="published")]
    incoming = [make_review("1", status="new")]
    snapshot = replace(incoming[0])

    merge(existing, incoming, now=NOW)

    assert incoming[0] == snapshot


def test_duplicate_ids_in_one_fetch_collapse():
    incoming = [make_review("1", text="first"), make_review("1", text="second")]

    merged = merge([], incoming, now=NOW)

    assert len(merged) == 1
    assert merged[0].text == "second"
    assert merged[0].status == "new"


def test_new_review_ids_reports_unseen_only():
    existing = [make_review("1")]
    incoming = [make_review("1"), make_review("2"), make_review("2"), make_review("3")]

    assert new_review_ids(existing, incoming) == ["2", "3"]


def test_known_review_keeps_original_time():
    """A re-posted review without a timestamp does not reset the stored one."""
    existing = [make_review("abc", time=1700000000)]

    merged = merge(existing, [make_review("abc", time=0, text="edited")], now=NOW)

    assert merged[0].time == 1700000000
    assert merged[0].text == "edited"


def test_known_review_time_set_once():
    existing = [make_review("abc", time=1700000000)]

    merged = merge(existing, [make_review("abc", time=1700009999)], now=NOW)

    assert merged[0].time == 1700000000
