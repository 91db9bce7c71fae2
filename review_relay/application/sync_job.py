"""
Sync Job - Scheduled Fetch / Merge / Auto-Distribute
=====================================================

State machine:

    IDLE -> FETCHING -> MERGING -> (DISTRIBUTING) -> IDLE

Triggered externally (cron hitting /tasks/sync-reviews, run_sync.py, or a
manual call). Nothing is persisted when the fetch fails.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from ..domain import (
    DistributionResult,
    NotFoundError,
    SyncFrequency,
    SyncSettings,
    merge,
    new_review_ids,
)
from ..infrastructure.google import ReviewFetcher
from ..infrastructure.persistence import ReviewStore, SettingsStore
from .distributor import Distributor, select_for_auto_distribution

logger = logging.getLogger(__name__)


class SyncState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MERGING = "merging"
    DISTRIBUTING = "distributing"


@dataclass
class SyncReport:
    """What a sync run did."""
    message: str
    sync_skipped: bool = False
    total_reviews: int = 0
    new_reviews: int = 0
    auto_distributed: int = 0
    distribution: Optional[DistributionResult] = None

    def to_dict(self) -> dict:
        if self.sync_skipped:
            return {"message": self.message, "syncSkipped": True}
        data = {
            "message": self.message,
            "syncSkipped": False,
            "totalReviews": self.total_reviews,
            "newReviews": self.new_reviews,
            "autoDistributed": self.auto_distributed,
        }
        if self.distribution is not None:
            data["distribution"] = self.distribution.to_dict()
        return data


def _to_utc(timestamp: str) -> datetime:
    parsed = datetime.fromisoformat(timestamp)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def is_sync_due(settings: SyncSettings, last_sync: Optional[str], now: datetime) -> bool:
    """
    Whether a scheduled (non-forced) sync should run at `now`.

    At most one scheduled sync per UTC day. Weekly uses syncDay as
    weekday with 0=Sunday; monthly uses it as day of month, clamped to
    the month's length.
    """
    frequency = SyncFrequency(settings.sync_frequency)
    if frequency is SyncFrequency.MANUAL:
        return False

    now = now.astimezone(timezone.utc)
    if last_sync and _to_utc(last_sync).date() >= now.date():
        return False

    if frequency is SyncFrequency.DAILY:
        return True
    if frequency is SyncFrequency.WEEKLY:
        sunday_based_weekday = (now.weekday() + 1) % 7
        return sunday_based_weekday == settings.sync_day % 7

    days_in_month = calendar.monthrange(now.year, now.month)[1]
    target_day = min(max(settings.sync_day, 1), days_in_month)
    return now.day == target_day


class SyncJob:
    """
    Orchestrates Fetcher -> Merger -> (optional) Distributor.

    USAGE:
        job = SyncJob(review_store, settings_store, fetcher_factory, distributor)
        report = job.run(force=True)
    """

    def __init__(
        self,
        reviews: ReviewStore,
        settings: SettingsStore,
        fetcher_factory: Callable[[SyncSettings, Optional[str]], ReviewFetcher],
        distributor: Distributor,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._reviews = reviews
        self._settings = settings
        self._fetcher_factory = fetcher_factory
        self._distributor = distributor
        self._clock = clock
        self.state = SyncState.IDLE

    def run(self, force: bool = False, access_token: Optional[str] = None) -> SyncReport:
        """
        Run one sync cycle.

        Args:
            force: Ignore the frequency schedule (manual trigger).
            access_token: Google OAuth token; selects Business Profile as the source.

        Raises:
            UpstreamError: Fetching failed; nothing was persisted.
        """
        sync_settings = self._settings.get_sync_settings()
        now = self._clock()

        if not force and not is_sync_due(sync_settings, self._settings.get_last_sync(), now):
            logger.info(f"Sync skipped (frequency={sync_settings.sync_frequency})")
            return SyncReport(message="No sync scheduled for now according to settings.", sync_skipped=True)

        try:
            self.state = SyncState.FETCHING
            fetched = self._fetcher_factory(sync_settings, access_token).fetch()

            self.state = SyncState.MERGING
            existing = self._reviews.get_all()
            added_ids = new_review_ids(existing, fetched)
            merged = merge(existing, fetched, now=now.isoformat())
            self._reviews.upsert(merged)
            self._settings.set_last_sync(now.isoformat())
            logger.info(f"Sync merged {len(fetched)} fetched reviews: {len(merged)} total, {len(added_ids)} new")

            report = SyncReport(
                message="Sync completed successfully",
                total_reviews=len(merged),
                new_reviews=len(added_ids),
            )

            if sync_settings.auto_distribute and added_ids:
                self.state = SyncState.DISTRIBUTING
                self._auto_distribute(merged, added_ids, sync_settings, report)

            return report
        finally:
            self.state = SyncState.IDLE

    def _auto_distribute(self, merged, added_ids, sync_settings: SyncSettings, report: SyncReport) -> None:
        added = set(added_ids)
        candidates = select_for_auto_distribution(
            [r for r in merged if r.id in added], sync_settings.min_rating
        )
        if not candidates:
            return
        if not sync_settings.default_endpoints:
            logger.warning("Auto-distribute is on but no default endpoints are configured")
            return

        try:
            report.distribution = self._distributor.distribute(
                [r.id for r in candidates], sync_settings.default_endpoints
            )
        except NotFoundError as e:
            logger.warning(f"Auto-distribution skipped: {e.message}")
            return

        report.auto_distributed = report.distribution.distributed
        logger.info(f"Auto-distributed {report.auto_distributed} reviews")
