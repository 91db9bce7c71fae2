"""
Domain Models
=============

Records that flow through the fetch -> merge -> distribute pipeline.

Wire names follow the JSON the dashboard and partner sites already consume
(`author_name`, `profile_photo_url`, `dateAdded`, `createdAt`, ...), so
every model serializes explicitly with to_dict().
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class ReviewStatus(Enum):
    """Operator-owned publication state of a review."""
    NEW = "new"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"


class SyncFrequency(Enum):
    """How often the scheduled sync is allowed to run."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    MANUAL = "manual"


@dataclass
class Review:
    """
    A single customer review.

    `status` and `date_added` belong to the operator: a fetch never
    changes them for a review that is already stored.
    """
    id: str
    author_name: str = ""
    rating: int = 0
    text: str = ""
    time: int = 0
    profile_photo_url: Optional[str] = None
    status: str = ReviewStatus.NEW.value
    date_added: str = ""

    @property
    def is_published(self) -> bool:
        return self.status == ReviewStatus.PUBLISHED.value

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "author_name": self.author_name,
            "rating": self.rating,
            "text": self.text,
            "time": self.time,
            "status": self.status,
            "dateAdded": self.date_added,
        }
        if self.profile_photo_url is not None:
            data["profile_photo_url"] = self.profile_photo_url
        return data


@dataclass
class Endpoint:
    """A partner URL that receives distributed reviews."""
    id: str
    name: str
    url: str
    active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "active": self.active,
        }
        if self.created_at:
            data["createdAt"] = self.created_at
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        return data


@dataclass
class EndpointResult:
    """Outcome of posting reviews to one endpoint."""
    endpoint: str
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"endpoint": self.endpoint, "success": self.success}
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class DistributionResult:
    """Aggregate outcome of one distribution call. Never persisted."""
    distributed: int
    endpoints: int
    results: List[EndpointResult] = field(default_factory=list)

    @property
    def any_success(self) -> bool:
        return any(r.success for r in self.results)

    def to_dict(self) -> dict:
        return {
            "distributed": self.distributed,
            "endpoints": self.endpoints,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class SyncSettings:
    """Operator preferences for the scheduled sync."""
    google_place_id: str = ""
    sync_frequency: str = SyncFrequency.WEEKLY.value
    sync_day: int = 1  # weekday (0=Sunday) for weekly, day of month for monthly
    auto_distribute: bool = False
    min_rating: int = 4
    default_endpoints: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.sync_frequency not in [f.value for f in SyncFrequency]:
            raise ValueError(f"Invalid sync frequency: {self.sync_frequency}")
        if not (1 <= self.min_rating <= 5):
            raise ValueError(f"Invalid minRating: {self.min_rating}. Must be 1-5")

    def to_dict(self) -> dict:
        return {
            "googlePlaceId": self.google_place_id,
            "syncFrequency": self.sync_frequency,
            "syncDay": self.sync_day,
            "autoDistribute": self.auto_distribute,
            "minRating": self.min_rating,
            "defaultEndpoints": list(self.default_endpoints),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SyncSettings":
        defaults = cls()
        return cls(
            google_place_id=data.get("googlePlaceId", defaults.google_place_id) or "",
            sync_frequency=data.get("syncFrequency", defaults.sync_frequency),
            sync_day=int(data.get("syncDay", defaults.sync_day)),
            auto_distribute=bool(data.get("autoDistribute", defaults.auto_distribute)),
            min_rating=int(data.get("minRating", defaults.min_rating)),
            default_endpoints=list(data.get("defaultEndpoints") or []),
        )
