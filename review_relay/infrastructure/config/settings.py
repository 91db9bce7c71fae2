"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses
- Single source of truth for all configurable values

Operator sync preferences (frequency, auto-distribution) are not here:
they are edited at runtime and live in the settings table.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass(frozen=True)
class GoogleSettings:
    """Google Places / Business Profile / OAuth settings."""

    # Places Details API
    places_api_key: str = field(default_factory=lambda: os.getenv("GOOGLE_PLACES_API_KEY", ""))
    place_id: str = field(default_factory=lambda: os.getenv("GOOGLE_PLACE_ID", ""))
    places_url: str = "https://maps.googleapis.com/maps/api/place/details/json"

    # Business Profile API (v4)
    account_id: str = field(default_factory=lambda: os.getenv("GOOGLE_ACCOUNT_ID", ""))
    location_id: str = field(default_factory=lambda: os.getenv("GOOGLE_LOCATION_ID", ""))
    business_profile_url: str = (
        "https://mybusiness.googleapis.com/v4/accounts/{account_id}/locations/{location_id}/reviews"
    )
    page_size: int = 50

    # OAuth client
    client_id: str = field(default_factory=lambda: os.getenv("GOOGLE_CLIENT_ID", ""))
    client_secret: str = field(default_factory=lambda: os.getenv("GOOGLE_CLIENT_SECRET", ""))
    redirect_uri: str = field(
        default_factory=lambda: os.getenv("GOOGLE_REDIRECT_URI", "http://127.0.0.1:8000/auth/callback")
    )
    auth_url: str = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url: str = "https://oauth2.googleapis.com/token"
    scope: str = "https://www.googleapis.com/auth/business.manage"

    timeout_seconds: int = field(default_factory=lambda: _env_int("GOOGLE_TIMEOUT_SECONDS", 15))

    @property
    def has_business_profile_location(self) -> bool:
        return bool(self.account_id and self.location_id)


@dataclass(frozen=True)
class DistributionSettings:
    """Outbound fan-out settings."""

    # Each partner POST is bounded by this timeout
    timeout_seconds: int = field(default_factory=lambda: _env_int("DISTRIBUTION_TIMEOUT_SECONDS", 10))
    max_workers: int = field(default_factory=lambda: _env_int("DISTRIBUTION_MAX_WORKERS", 8))

    # False: reviews are marked published after every distribution call.
    # True: only when at least one endpoint accepted them.
    require_success: bool = field(default_factory=lambda: _env_bool("DISTRIBUTION_REQUIRE_SUCCESS", False))


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from review_relay.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.google.place_id)
    """

    google: GoogleSettings = field(default_factory=GoogleSettings)
    distribution: DistributionSettings = field(default_factory=DistributionSettings)

    # Key partner sites send in `x-api-key` to read published reviews
    api_key: str = field(default_factory=lambda: os.getenv("API_KEY", ""))

    database_file: Path = field(
        default_factory=lambda: Path(os.getenv("DATABASE_FILE", "reviewrelay.db"))
    )

    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.google.places_api_key:
            issues.append(
                "WARNING: GOOGLE_PLACES_API_KEY not set. "
                "Scheduled sync cannot fetch reviews from Google Places."
            )

        if not self.api_key:
            issues.append(
                "WARNING: API_KEY not set. "
                "Partner sites cannot read published reviews."
            )

        if not (self.google.client_id and self.google.client_secret):
            issues.append(
                "WARNING: GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET not set. "
                "Business Profile sign-in is disabled."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
