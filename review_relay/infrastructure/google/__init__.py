from .review_fetcher import (
    ReviewFetcher,
    PlacesReviewFetcher,
    BusinessProfileReviewFetcher,
    build_fetcher,
)
from .oauth import GoogleOAuthClient, TOKEN_COOKIE, cookie_max_age, read_access_token

__all__ = [
    "ReviewFetcher",
    "PlacesReviewFetcher",
    "BusinessProfileReviewFetcher",
    "build_fetcher",
    "GoogleOAuthClient",
    "TOKEN_COOKIE",
    "cookie_max_age",
    "read_access_token",
]
