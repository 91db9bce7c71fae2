"""
Tests for the SQLite stores.
"""

from review_relay.domain import SyncSettings
from tests.helpers import make_review


def test_upsert_and_read_back_in_insertion_order(review_store):
    review_store.upsert([make_review("3"), make_review("1"), make_review("2")])

    assert [r.id for r in review_store.get_all()] == ["3", "1", "2"]


def test_upsert_overwrites_existing_row(review_store):
    review_store.upsert([make_review("1", text="old")])
    review_store.upsert([make_review("1", text="new")])

    reviews = review_store.get_all()
    assert len(reviews) == 1
    assert reviews[0].text == "new"


def test_merge_reviews_preserves_status(review_store):
    """Seeded new review gets the fetched text and keeps its status."""
    review_store.upsert([make_review("1700000000", status="new", text="original")])

    review_store.merge_reviews([make_review("1700000000", status="published", text="updated")])

    stored = review_store.get("1700000000")
    assert stored.text == "updated"
    assert stored.status == "new"


def test_update_status(review_store):
    review_store.upsert([make_review("1")])

    updated = review_store.update_status("1", "unpublished")

    assert updated.status == "unpublished"
    assert review_store.get("1").status == "unpublished"


def test_update_status_unknown_id(review_store):
    assert review_store.update_status("missing", "published") is None


def test_mark_published(review_store):
    review_store.upsert([make_review("1"), make_review("2"), make_review("3")])

    changed = review_store.mark_published(["1", "3", "missing"])

    assert changed == 2
    assert [r.status for r in review_store.get_all()] == ["published", "new", "published"]


def test_profile_photo_round_trips(review_store):
    review_store.upsert([make_review("1", profile_photo_url="https://photo")])

    assert review_store.get("1").profile_photo_url == "https://photo"


def test_endpoint_crud(endpoint_store):
    created = endpoint_store.create("Main Website", "https://example.com/api/reviews")
    assert created.id
    assert created.active is True
    assert created.created_at

    updated = endpoint_store.update(created.id, active=False, name=None)
    assert updated.active is False
    assert updated.name == "Main Website"
    assert updated.updated_at

    assert [e.id for e in endpoint_store.list_all()] == [created.id]
    assert endpoint_store.delete(created.id) is True
    assert endpoint_store.list_all() == []


def test_endpoint_unknown_ids(endpoint_store):
    assert endpoint_store.get("nope") is None
    assert endpoint_store.update("nope", name="x") is None
    assert endpoint_store.delete("nope") is False


def test_sync_settings_defaults_and_save(settings_store):
    assert settings_store.get_sync_settings() == SyncSettings()

    saved = SyncSettings(google_place_id="place", sync_frequency="daily", auto_distribute=True,
                         min_rating=5, default_endpoints=["e1"])
    settings_store.save_sync_settings(saved)

    assert settings_store.get_sync_settings() == saved


def test_last_sync(settings_store):
    assert settings_store.get_last_sync() is None

    settings_store.set_last_sync("2025-01-01T00:00:00+00:00")

    assert settings_store.get_last_sync() == "2025-01-01T00:00:00+00:00"
