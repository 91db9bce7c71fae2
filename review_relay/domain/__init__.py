# Domain Layer
# ============
# Pure business logic with no external dependencies:
# - models: Review, Endpoint, distribution results, sync settings
# - merger: fetch/store merge that preserves operator-owned fields
# - intake: validation of posted review payloads
# - errors: error taxonomy mapped to HTTP status codes

from .errors import (
    ReviewRelayError,
    ValidationError,
    NotFoundError,
    UpstreamError,
    UnauthorizedError,
)
from .models import (
    Review,
    ReviewStatus,
    Endpoint,
    EndpointResult,
    DistributionResult,
    SyncFrequency,
    SyncSettings,
    utc_now_iso,
)
from .merger import merge, new_review_ids
from .intake import parse_review_payload, parse_review

__all__ = [
    "ReviewRelayError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "UnauthorizedError",
    "Review",
    "ReviewStatus",
    "Endpoint",
    "EndpointResult",
    "DistributionResult",
    "SyncFrequency",
    "SyncSettings",
    "utc_now_iso",
    "merge",
    "new_review_ids",
    "parse_review_payload",
    "parse_review",
]
