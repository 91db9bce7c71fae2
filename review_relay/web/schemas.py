"""
Request bodies accepted by the HTTP API.

Field aliases keep the camelCase names the dashboard already sends.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain import SyncSettings


class StatusUpdate(BaseModel):
    id: str = Field(min_length=1)
    status: Literal["new", "published", "unpublished"]


class DistributeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    review_ids: List[str] = Field(alias="reviewIds")
    endpoint_ids: List[str] = Field(alias="endpointIds")


class EndpointCreate(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    active: bool = True


class EndpointUpdate(BaseModel):
    id: str = Field(min_length=1)
    name: Optional[str] = None
    url: Optional[str] = None
    active: Optional[bool] = None


class EndpointDelete(BaseModel):
    id: str = Field(min_length=1)


class SyncSettingsBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    google_place_id: str = Field(default="", alias="googlePlaceId")
    sync_frequency: Literal["daily", "weekly", "monthly", "manual"] = Field(default="weekly", alias="syncFrequency")
    sync_day: int = Field(default=1, ge=0, le=31, alias="syncDay")
    auto_distribute: bool = Field(default=False, alias="autoDistribute")
    min_rating: int = Field(default=4, ge=1, le=5, alias="minRating")
    default_endpoints: List[str] = Field(default_factory=list, alias="defaultEndpoints")

    @model_validator(mode="after")
    def check_sync_day(self) -> "SyncSettingsBody":
        # weekly: 0=Sunday..6=Saturday, monthly: day of month
        if self.sync_frequency == "weekly" and not 0 <= self.sync_day <= 6:
            raise ValueError("syncDay must be 0-6 for weekly sync")
        if self.sync_frequency == "monthly" and not 1 <= self.sync_day <= 31:
            raise ValueError("syncDay must be 1-31 for monthly sync")
        return self

    def to_domain(self) -> SyncSettings:
        return SyncSettings(
            google_place_id=self.google_place_id.strip(),
            sync_frequency=self.sync_frequency,
            sync_day=self.sync_day,
            auto_distribute=self.auto_distribute,
            min_rating=self.min_rating,
            default_endpoints=self.default_endpoints,
        )
