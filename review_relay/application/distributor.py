"""
Review Distributor
==================

Posts selected reviews to selected partner endpoints.

BEHAVIOR:
- Only active endpoints are called; inactive ones are skipped silently.
- One POST per endpoint, payload {"reviews": [...]}, all run concurrently.
- Every call is awaited; one endpoint failing never affects the others.
- Only a 2xx reply counts as success; redirects are not followed.
- No retries. Each request is bounded by the configured timeout.
- Afterwards the distributed reviews are marked `published`.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional

import requests

from ..domain import (
    DistributionResult,
    Endpoint,
    EndpointResult,
    NotFoundError,
    Review,
)
from ..infrastructure.config import DistributionSettings, get_settings
from ..infrastructure.persistence import EndpointStore, ReviewStore

logger = logging.getLogger(__name__)


class Distributor:
    """
    Fan-out distribution of reviews to partner endpoints.

    USAGE:
        distributor = Distributor(review_store, endpoint_store)
        result = distributor.distribute(["1700000000"], ["website1"])
        print(result.to_dict())
    """

    def __init__(
        self,
        reviews: ReviewStore,
        endpoints: EndpointStore,
        session: Optional[requests.Session] = None,
        settings: Optional[DistributionSettings] = None,
    ):
        self._reviews = reviews
        self._endpoints = endpoints
        self._session = session or requests.Session()
        self._settings = settings or get_settings().distribution

    def distribute(self, review_ids: Iterable[str], endpoint_ids: Iterable[str]) -> DistributionResult:
        """
        Distribute reviews to endpoints.

        Raises:
            NotFoundError: no stored review matches, or no active endpoint matches.
        """
        wanted_reviews = set(review_ids)
        wanted_endpoints = set(endpoint_ids)

        selected = [r for r in self._reviews.get_all() if r.id in wanted_reviews]
        if not selected:
            raise NotFoundError("No reviews found to distribute")

        targets = [e for e in self._endpoints.list_all() if e.id in wanted_endpoints and e.active]
        if not targets:
            raise NotFoundError("No active endpoints found")

        payload = {"reviews": [r.to_dict() for r in selected]}
        logger.info(f"Distributing {len(selected)} reviews to {len(targets)} endpoints")

        workers = max(1, min(self._settings.max_workers, len(targets)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda endpoint: self._post(endpoint, payload), targets))

        result = DistributionResult(distributed=len(selected), endpoints=len(targets), results=results)

        failed = [r.endpoint for r in results if not r.success]
        if failed:
            logger.warning(f"Distribution failed for endpoints: {', '.join(failed)}")

        if self._settings.require_success and not result.any_success:
            logger.warning("No endpoint accepted the reviews; statuses left unchanged")
        else:
            self._reviews.mark_published(r.id for r in selected)

        return result

    def _post(self, endpoint: Endpoint, payload: dict) -> EndpointResult:
        try:
            # requests replays a redirected POST as GET
            response = self._session.post(
                endpoint.url, json=payload, timeout=self._settings.timeout_seconds, allow_redirects=False
            )
            if not 200 <= response.status_code < 300:
                logger.warning(f"POST to {endpoint.name} ({endpoint.url}) returned {response.status_code}")
                return EndpointResult(
                    endpoint=endpoint.name,
                    success=False,
                    status_code=response.status_code,
                    error=f"HTTP {response.status_code}",
                )
            return EndpointResult(endpoint=endpoint.name, success=True, status_code=response.status_code)
        except requests.RequestException as e:
            logger.warning(f"POST to {endpoint.name} ({endpoint.url}) failed: {e}")
            return EndpointResult(endpoint=endpoint.name, success=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error posting to {endpoint.name}: {e}")
            return EndpointResult(endpoint=endpoint.name, success=False, error=str(e) or type(e).__name__)


def select_for_auto_distribution(reviews: List[Review], min_rating: int) -> List[Review]:
    """Reviews good enough to be pushed without operator review."""
    return [r for r in reviews if r.rating >= min_rating]
