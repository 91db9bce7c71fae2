"""
Google OAuth Client
===================

Supplies Business Profile credentials:
1. authorization_url() -> redirect the operator to Google's consent screen
2. exchange_code(code) -> tokens dict (access_token, refresh_token, expiry_date, ...)

Tokens are kept client-side in an HTTP-only cookie; nothing is stored here.
"""

import json
import logging
import time
from typing import Optional
from urllib.parse import urlencode

import requests

from ...domain import UpstreamError, ValidationError
from ..config import GoogleSettings, get_settings

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "googTokens"


class GoogleOAuthClient:
    """Authorization-code flow against Google's OAuth 2.0 endpoints."""

    def __init__(self, google: Optional[GoogleSettings] = None, session: Optional[requests.Session] = None):
        self._google = google or get_settings().google
        self._session = session or requests.Session()

    def authorization_url(self) -> str:
        if not self._google.client_id:
            raise UpstreamError("Missing OAuth credentials", "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET")
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": self._google.redirect_uri,
            "response_type": "code",
            "scope": self._google.scope,
            # Offline access + forced consent so Google returns a refresh token
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self._google.auth_url}?{urlencode(params)}"

    def exchange_code(self, code: str) -> dict:
        """Exchange an authorization code for tokens."""
        if not code:
            raise ValidationError("Missing code")

        try:
            response = self._session.post(
                self._google.token_url,
                data={
                    "code": code,
                    "client_id": self._google.client_id,
                    "client_secret": self._google.client_secret,
                    "redirect_uri": self._google.redirect_uri,
                    "grant_type": "authorization_code",
                },
                timeout=self._google.timeout_seconds,
            )
            response.raise_for_status()
            tokens = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"OAuth token exchange failed: {e}")
            raise UpstreamError("Failed to exchange authorization code", str(e))

        expires_in = tokens.pop("expires_in", None)
        if expires_in is not None:
            tokens["expiry_date"] = int(time.time() * 1000) + int(expires_in) * 1000
        logger.info("OAuth tokens obtained")
        return tokens


def cookie_max_age(tokens: dict, now_ms: Optional[int] = None) -> Optional[int]:
    """Seconds until the access token expires, or None if unknown."""
    expiry_date = tokens.get("expiry_date")
    if not expiry_date:
        return None
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return max(0, (int(expiry_date) - now_ms) // 1000)


def read_access_token(cookie_value: Optional[str]) -> Optional[str]:
    """Access token from the token cookie, or None if absent/unreadable."""
    if not cookie_value:
        return None
    try:
        tokens = json.loads(cookie_value)
    except ValueError:
        raise ValidationError("Invalid token data. Please re-authenticate.")
    if not isinstance(tokens, dict):
        raise ValidationError("Invalid token data. Please re-authenticate.")
    return tokens.get("access_token")
