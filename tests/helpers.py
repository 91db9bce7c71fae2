"""
Test helpers: fake HTTP session and review factory.
"""

import threading

import requests

from review_relay.domain import Review


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data=None):
        self.status_code = status_code
        self._json = json_data if json_data is not None else {}

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Stand-in for requests.Session.

    `routes` maps a URL to a FakeResponse, or to an exception instance
    that the call should raise. Every call is recorded in `calls`.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self._lock = threading.Lock()

    def _handle(self, method, url, **kwargs):
        with self._lock:
            self.calls.append({"method": method, "url": url, **kwargs})
        outcome = self.routes.get(url, FakeResponse(404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)

    def urls_called(self, method=None):
        return [c["url"] for c in self.calls if method is None or c["method"] == method]

    def close(self):
        pass


def make_review(review_id="1700000000", rating=5, status="new", **overrides) -> Review:
    data = dict(
        id=review_id,
        author_name="Jane Doe",
        rating=rating,
        text="Great service",
        time=int(review_id) if review_id.isdigit() else 1700000000,
        profile_photo_url=None,
        status=status,
        date_added="2024-01-01T00:00:00+00:00",
    )
    data.update(overrides)
    return Review(**data)


