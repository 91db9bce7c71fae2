"""
Review Fetchers - Google Places & Business Profile
===================================================

Pull reviews from Google and normalize them into domain Reviews.

Two sources:
- PlacesReviewFetcher: Places Details API, API key + place id.
  Returns the most relevant reviews only, no OAuth required.
- BusinessProfileReviewFetcher: Business Profile API v4, OAuth access
  token + account/location ids.

Fetchers never deduplicate; merging against the store is the Merger's job.

USAGE:
    fetcher = PlacesReviewFetcher(api_key="...", place_id="ChIJ...")
    reviews = fetcher.fetch()
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

import requests

from ...domain import Review, ReviewStatus, UpstreamError, utc_now_iso
from ..config import GoogleSettings, get_settings

logger = logging.getLogger(__name__)

# Business Profile API star rating enum -> 1..5
STAR_MAP = {
    "ONE": 1,
    "TWO": 2,
    "THREE": 3,
    "FOUR": 4,
    "FIVE": 5,
}

PLACES_OK_STATUSES = ("OK", "ZERO_RESULTS")


class ReviewFetcher(ABC):
    """Source of freshly fetched reviews."""

    @abstractmethod
    def fetch(self) -> List[Review]:
        """Fetch and normalize reviews. Raises UpstreamError on failure."""
        ...


class PlacesReviewFetcher(ReviewFetcher):
    """Google Places Details API (`fields=reviews`)."""

    def __init__(
        self,
        api_key: str,
        place_id: str,
        session: Optional[requests.Session] = None,
        google: Optional[GoogleSettings] = None,
    ):
        self._google = google or get_settings().google
        self._api_key = api_key
        self._place_id = place_id
        self._session = session or requests.Session()

    def fetch(self) -> List[Review]:
        if not self._api_key or not self._place_id:
            raise UpstreamError(
                "Missing API credentials",
                "Set GOOGLE_PLACES_API_KEY and configure your Google Place ID",
            )

        try:
            response = self._session.get(
                self._google.places_url,
                params={"place_id": self._place_id, "fields": "reviews", "key": self._api_key},
                timeout=self._google.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Places API request failed: {e}")
            raise UpstreamError("Failed to fetch reviews", str(e))

        status = data.get("status", "OK")
        if status not in PLACES_OK_STATUSES:
            error = data.get("error_message") or status
            logger.error(f"Places API returned {status}: {error}")
            raise UpstreamError("Failed to fetch reviews", error)

        raw_reviews = (data.get("result") or {}).get("reviews") or []
        now = utc_now_iso()
        reviews = _rated_only((self._normalize(raw, now) for raw in raw_reviews), "Places")
        logger.info(f"Fetched {len(reviews)} reviews from Google Places")
        return reviews

    @staticmethod
    def _normalize(raw: dict, now: str) -> Review:
        time = int(raw.get("time") or 0)
        return Review(
            id=str(time),
            author_name=raw.get("author_name") or "",
            rating=int(raw.get("rating") or 0),
            text=raw.get("text") or "",
            time=time,
            profile_photo_url=raw.get("profile_photo_url"),
            status=ReviewStatus.NEW.value,
            date_added=now,
        )


class BusinessProfileReviewFetcher(ReviewFetcher):
    """Google Business Profile API v4 `accounts.locations.reviews.list`."""

    def __init__(
        self,
        access_token: str,
        account_id: str,
        location_id: str,
        session: Optional[requests.Session] = None,
        google: Optional[GoogleSettings] = None,
    ):
        self._google = google or get_settings().google
        self._access_token = access_token
        self._account_id = account_id
        self._location_id = location_id
        self._session = session or requests.Session()

    def fetch(self) -> List[Review]:
        if not self._access_token:
            raise UpstreamError("Not authenticated. Please sign in first.")
        if not self._account_id or not self._location_id:
            raise UpstreamError(
                "Missing Business Profile location",
                "Set GOOGLE_ACCOUNT_ID and GOOGLE_LOCATION_ID",
            )

        url = self._google.business_profile_url.format(
            account_id=self._account_id, location_id=self._location_id
        )
        try:
            response = self._session.get(
                url,
                headers={"Authorization": f"Bearer {self._access_token}"},
                params={"pageSize": self._google.page_size, "orderBy": "updateTime desc"},
                timeout=self._google.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Business Profile API request failed: {e}")
            raise UpstreamError("Failed to fetch reviews", str(e))

        now = utc_now_iso()
        reviews = _rated_only((self._normalize(raw, now) for raw in data.get("reviews") or []), "Business Profile")
        logger.info(f"Fetched {len(reviews)} reviews from Business Profile")
        return reviews

    @staticmethod
    def _normalize(raw: dict, now: str) -> Review:
        reviewer = raw.get("reviewer") or {}
        time = _parse_rfc3339(raw.get("createTime"))

        review_id = raw.get("reviewId")
        if not review_id:
            name = raw.get("name") or ""
            review_id = name.split("/")[-1] if name else str(time)

        return Review(
            id=review_id,
            author_name=reviewer.get("displayName") or ("Anonymous" if reviewer.get("isAnonymous") else ""),
            rating=_star_to_int(raw.get("starRating")),
            text=(raw.get("comment") or "").strip(),
            time=time,
            profile_photo_url=reviewer.get("profilePhotoUrl"),
            status=ReviewStatus.NEW.value,
            date_added=now,
        )


def _rated_only(reviews: Iterable[Review], source: str) -> List[Review]:
    """Drop reviews whose rating is not 1..5 (missing or STAR_RATING_UNSPECIFIED)."""
    kept = []
    for review in reviews:
        if 1 <= review.rating <= 5:
            kept.append(review)
        else:
            logger.warning(f"Skipping {source} review {review.id}: rating {review.rating} is not 1-5")
    return kept


def _star_to_int(star_rating: Optional[str]) -> int:
    if not star_rating:
        return 0
    value = str(star_rating).upper().replace("STAR_RATING_", "")
    if value.isdigit():
        return int(value)
    return STAR_MAP.get(value, 0)


def _parse_rfc3339(value: Optional[str]) -> int:
    """'2024-01-15T10:30:00.123Z' -> epoch seconds (0 when absent/invalid)."""
    if not value:
        return 0
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        logger.warning(f"Unparseable review timestamp: {value}")
        return 0


def build_fetcher(
    place_id: str = "",
    access_token: Optional[str] = None,
    session: Optional[requests.Session] = None,
    google: Optional[GoogleSettings] = None,
) -> ReviewFetcher:
    """
    Pick the review source for the current request.

    Business Profile when an OAuth access token and a configured
    account/location exist, otherwise Places with the given place id
    (falling back to GOOGLE_PLACE_ID).
    """
    google = google or get_settings().google
    if access_token and google.has_business_profile_location:
        return BusinessProfileReviewFetcher(
            access_token, google.account_id, google.location_id, session=session, google=google
        )
    return PlacesReviewFetcher(
        google.places_api_key, place_id or google.place_id, session=session, google=google
    )
