"""
Shared fixtures: a throwaway SQLite database per test and a fake HTTP session.
"""

import pytest

from review_relay.infrastructure.persistence import (
    SQLiteEndpointStore,
    SQLiteReviewStore,
    SQLiteSettingsStore,
    init_database,
)
from tests.helpers import FakeSession


@pytest.fixture
def db(tmp_path):
    return init_database(str(tmp_path / "test.db"))


@pytest.fixture
def review_store(db):
    return SQLiteReviewStore(db)


@pytest.fixture
def endpoint_store(db):
    return SQLiteEndpointStore(db)


@pytest.fixture
def settings_store(db):
    return SQLiteSettingsStore(db)


@pytest.fixture
def fake_session():
    return FakeSession()
