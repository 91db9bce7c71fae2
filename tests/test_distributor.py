"""
Tests for the fan-out distributor.
"""

import pytest
import requests

from review_relay.application import Distributor
from review_relay.domain import NotFoundError
from review_relay.infrastructure.config import DistributionSettings
from tests.helpers import FakeResponse, FakeSession, make_review

URL_1 = "https://one.example.com/reviews"
URL_2 = "https://two.example.com/reviews"


def _settings(require_success=False):
    return DistributionSettings(timeout_seconds=3, max_workers=4, require_success=require_success)


@pytest.fixture
def endpoints(endpoint_store):
    e1 = endpoint_store.create("One", URL_1)
    e2 = endpoint_store.create("Two", URL_2)
    return e1, e2


def test_inactive_endpoint_is_skipped(review_store, endpoint_store, endpoints):
    e1, e2 = endpoints
    endpoint_store.update(e2.id, active=False)
    review_store.upsert([make_review("r1")])
    session = FakeSession({URL_1: FakeResponse(200)})

    result = Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(
        ["r1"], [e1.id, e2.id]
    )

    assert session.urls_called("POST") == [URL_1]
    assert result.endpoints == 1
    assert result.distributed == 1


def test_payload_and_timeout(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1"), make_review("r2")])
    session = FakeSession({URL_1: FakeResponse(201)})

    Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(["r2"], [e1.id])

    call = session.calls[0]
    assert [r["id"] for r in call["json"]["reviews"]] == ["r2"]
    assert call["timeout"] == 3


def test_failure_is_isolated_per_endpoint(review_store, endpoint_store, endpoints):
    e1, e2 = endpoints
    review_store.upsert([make_review("r1")])
    session = FakeSession({
        URL_1: requests.ConnectionError("connection refused"),
        URL_2: FakeResponse(200),
    })

    result = Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(
        ["r1"], [e1.id, e2.id]
    )

    outcomes = {r.endpoint: r for r in result.results}
    assert outcomes["One"].success is False
    assert "connection refused" in outcomes["One"].error
    assert outcomes["Two"].success is True
    assert outcomes["Two"].status_code == 200


def test_http_error_status_is_a_failure(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1")])
    session = FakeSession({URL_1: FakeResponse(500)})

    result = Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(
        ["r1"], [e1.id]
    )

    assert result.results[0].to_dict() == {
        "endpoint": "One", "success": False, "statusCode": 500, "error": "HTTP 500"
    }


def test_redirect_is_a_failure_and_not_followed(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1")])
    session = FakeSession({URL_1: FakeResponse(302)})

    result = Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(
        ["r1"], [e1.id]
    )

    assert result.results[0].success is False
    assert result.results[0].status_code == 302
    assert session.calls[0]["allow_redirects"] is False


def test_reviews_marked_published_even_when_all_fail(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1"), make_review("r2")])
    session = FakeSession({URL_1: requests.Timeout("timed out")})

    Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(["r1"], [e1.id])

    assert review_store.get("r1").status == "published"
    assert review_store.get("r2").status == "new"


def test_require_success_leaves_status_on_total_failure(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1")])
    session = FakeSession({URL_1: requests.Timeout("timed out")})

    Distributor(
        review_store, endpoint_store, session=session, settings=_settings(require_success=True)
    ).distribute(["r1"], [e1.id])

    assert review_store.get("r1").status == "new"


def test_no_matching_reviews(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    distributor = Distributor(review_store, endpoint_store, session=FakeSession(), settings=_settings())

    with pytest.raises(NotFoundError) as exc_info:
        distributor.distribute([], [e1.id])
    assert exc_info.value.message == "No reviews found to distribute"


def test_no_active_endpoints(review_store, endpoint_store, endpoints):
    _, e2 = endpoints
    endpoint_store.update(e2.id, active=False)
    review_store.upsert([make_review("r1")])
    distributor = Distributor(review_store, endpoint_store, session=FakeSession(), settings=_settings())

    with pytest.raises(NotFoundError) as exc_info:
        distributor.distribute(["r1"], [])
    assert exc_info.value.message == "No active endpoints found"

    with pytest.raises(NotFoundError):
        distributor.distribute(["r1"], [e2.id])


def test_result_serialization(review_store, endpoint_store, endpoints):
    e1, _ = endpoints
    review_store.upsert([make_review("r1")])
    session = FakeSession({URL_1: FakeResponse(202)})

    result = Distributor(review_store, endpoint_store, session=session, settings=_settings()).distribute(
        ["r1"], [e1.id]
    )

    assert result.to_dict() == {
        "distributed": 1,
        "endpoints": 1,
        "results": [{"endpoint": "One", "success": True, "statusCode": 202}],
    }
