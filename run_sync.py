"""
Sync Runner - Scheduled Review Sync
====================================

Runs one fetch -> merge -> auto-distribute cycle against the local database.
Meant for cron; respects the sync frequency saved in settings unless
--force is given.

    python run_sync.py            # scheduled run
    python run_sync.py --force    # sync now
"""

import argparse
import logging
import sys

import requests

from review_relay.application import Distributor, SyncJob
from review_relay.domain import ReviewRelayError
from review_relay.infrastructure.config import get_settings
from review_relay.infrastructure.google import build_fetcher
from review_relay.infrastructure.persistence import (
    SQLiteEndpointStore,
    SQLiteReviewStore,
    SQLiteSettingsStore,
    init_database,
)

logger = logging.getLogger(__name__)


def run_sync(force: bool = False) -> int:
    """Run one sync cycle. Returns a process exit code."""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

    for issue in settings.validate():
        logger.warning(issue)

    db = init_database(str(settings.database_file))
    reviews = SQLiteReviewStore(db)
    settings_store = SQLiteSettingsStore(db)

    with requests.Session() as session:
        distributor = Distributor(reviews, SQLiteEndpointStore(db), session=session, settings=settings.distribution)
        job = SyncJob(
            reviews,
            settings_store,
            lambda sync_settings, access_token=None: build_fetcher(
                sync_settings.google_place_id, access_token, session=session, google=settings.google
            ),
            distributor,
        )

        try:
            report = job.run(force=force)
        except ReviewRelayError as e:
            logger.error(f"Sync failed: {e.message} ({e.error})")
            return 1

    if report.sync_skipped:
        print(report.message)
        return 0

    print("=" * 60)
    print(f"   {report.message}")
    print(f"   Total reviews:    {report.total_reviews}")
    print(f"   New reviews:      {report.new_reviews}")
    print(f"   Auto-distributed: {report.auto_distributed}")
    print("=" * 60)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Review Relay - scheduled review sync")
    parser.add_argument("--force", action="store_true", help="Ignore the sync frequency and sync now")
    args = parser.parse_args()
    sys.exit(run_sync(force=args.force))


if __name__ == "__main__":
    main()
