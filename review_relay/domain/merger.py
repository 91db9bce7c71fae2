"""
Review Merger
=============

Combines freshly fetched reviews with the stored set.

RULES:
- Incoming content fields always win.
- `status`, `date_added` and `time` of a known review are kept.
- Unseen reviews start as `new` with a fresh `date_added`.
- Stored reviews that were not re-fetched stay untouched (never deletes).
- Output keeps insertion order: stored reviews first, then unseen ones.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .models import Review, ReviewStatus, utc_now_iso

logger = logging.getLogger(__name__)


def merge(existing: Iterable[Review], incoming: Iterable[Review], now: Optional[str] = None) -> List[Review]:
    """
    Merge incoming reviews into the existing set.

    Args:
        existing: Reviews currently in the store.
        incoming: Reviews from the latest fetch or intake.
        now: Timestamp used for new `date_added` values (defaults to current UTC).

    Returns:
        The combined review list. Merging the same incoming set twice
        gives the same result as merging it once.
    """
    now = now or utc_now_iso()
    merged: Dict[str, Review] = {review.id: review for review in existing}
    added = 0

    for review in incoming:
        current = merged.get(review.id)
        if current is not None:
            merged[review.id] = replace(
                review,
                status=current.status or ReviewStatus.NEW.value,
                date_added=current.date_added or now,
                time=current.time or review.time,
            )
        else:
            merged[review.id] = replace(review, status=ReviewStatus.NEW.value, date_added=now)
            added += 1

    logger.debug(f"Merged reviews: {len(merged)} total, {added} new")
    return list(merged.values())


def new_review_ids(existing: Iterable[Review], incoming: Iterable[Review]) -> List[str]:
    """Ids of incoming reviews not present in the existing set, in fetch order."""
    known = {review.id for review in existing}
    seen = set()
    result = []
    for review in incoming:
        if review.id not in known and review.id not in seen:
            seen.add(review.id)
            result.append(review.id)
    return result
