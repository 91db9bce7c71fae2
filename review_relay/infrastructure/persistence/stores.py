"""
Store Interfaces
================

Abstract persistence contracts the pipeline depends on.
Implement these to add new storage backends; the SQLite implementations
live in database.py.

USAGE:
    store = SQLiteReviewStore(db)
    merged = store.merge_reviews(fetched)
    store.update_status("1700000000", "published")
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ...domain import Endpoint, Review, SyncSettings, merge

logger = logging.getLogger(__name__)


class ReviewStore(ABC):
    """Reviews keyed by their external id. Reviews are never deleted."""

    @abstractmethod
    def get_all(self) -> List[Review]:
        """All stored reviews in insertion order."""
        ...

    @abstractmethod
    def get(self, review_id: str) -> Optional[Review]:
        ...

    @abstractmethod
    def upsert(self, reviews: Iterable[Review]) -> None:
        """Insert or overwrite the given reviews as-is."""
        ...

    @abstractmethod
    def update_status(self, review_id: str, status: str) -> Optional[Review]:
        """Change one review's status. Returns None if the id is unknown."""
        ...

    @abstractmethod
    def mark_published(self, review_ids: Iterable[str]) -> int:
        """Set status=published on the given ids. Returns rows changed."""
        ...

    def merge_reviews(self, incoming: Iterable[Review]) -> List[Review]:
        """
        Merge incoming reviews with the stored set and persist the result.

        The whole set is read, merged and written back per call, so two
        overlapping calls are last-writer-wins.
        """
        merged = merge(self.get_all(), list(incoming))
        self.upsert(merged)
        logger.info(f"Stored {len(merged)} reviews after merge")
        return merged


class EndpointStore(ABC):
    """Distribution endpoints managed by the operator."""

    @abstractmethod
    def list_all(self) -> List[Endpoint]:
        ...

    @abstractmethod
    def get(self, endpoint_id: str) -> Optional[Endpoint]:
        ...

    @abstractmethod
    def create(self, name: str, url: str, active: bool = True) -> Endpoint:
        ...

    @abstractmethod
    def update(self, endpoint_id: str, **updates) -> Optional[Endpoint]:
        """Update name/url/active. Returns None if the id is unknown."""
        ...

    @abstractmethod
    def delete(self, endpoint_id: str) -> bool:
        """Returns False if the id is unknown."""
        ...


class SettingsStore(ABC):
    """Operator sync preferences and sync bookkeeping."""

    @abstractmethod
    def get_sync_settings(self) -> SyncSettings:
        ...

    @abstractmethod
    def save_sync_settings(self, settings: SyncSettings) -> SyncSettings:
        ...

    @abstractmethod
    def get_last_sync(self) -> Optional[str]:
        """ISO timestamp of the last completed sync, if any."""
        ...

    @abstractmethod
    def set_last_sync(self, timestamp: str) -> None:
        ...
