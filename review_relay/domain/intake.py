"""
Review Intake
=============

The one accepted contract for reviews posted to the store.

Accepted body shapes:
    [ {review}, ... ]
    {"result": {"reviews": [ {review}, ... ]}}

Anything else is rejected with ValidationError.
"""

from typing import Any, List

from .errors import ValidationError
from .models import Review


def parse_review_payload(body: Any) -> List[Review]:
    """Validate a posted body and return the reviews it carries."""
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        result = body.get("result")
        items = result.get("reviews") if isinstance(result, dict) else None
        if not isinstance(items, list):
            raise ValidationError(
                "Expected an array of reviews",
                "Body must be a JSON array or {\"result\": {\"reviews\": [...]}}",
            )
    else:
        raise ValidationError("Expected an array of reviews")

    return [parse_review(item, index) for index, item in enumerate(items)]


def parse_review(item: Any, index: int = 0) -> Review:
    """Validate a single review object."""
    if not isinstance(item, dict):
        raise ValidationError(f"Review at position {index} is not an object")

    raw_id = item.get("id")
    raw_time = item.get("time")
    if raw_id in (None, "") and raw_time in (None, ""):
        raise ValidationError(f"Review at position {index} is missing required field: id or time")

    try:
        time = int(raw_time) if raw_time not in (None, "") else 0
    except (TypeError, ValueError):
        raise ValidationError(f"Review at position {index} has an invalid time: {raw_time!r}")

    try:
        rating = int(item.get("rating"))
    except (TypeError, ValueError):
        raise ValidationError(f"Review at position {index} has an invalid rating: {item.get('rating')!r}")
    if not (1 <= rating <= 5):
        raise ValidationError(f"Review at position {index} has rating {rating}. Must be 1-5")

    return Review(
        id=str(raw_id) if raw_id not in (None, "") else str(time),
        author_name=item.get("author_name") or "",
        rating=rating,
        text=item.get("text") or "",
        time=time,
        profile_photo_url=item.get("profile_photo_url"),
        status=item.get("status") or "new",
        date_added=item.get("dateAdded") or "",
    )
