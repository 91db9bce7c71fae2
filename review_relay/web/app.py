"""
FastAPI Web Application - Review Relay API
===========================================

JSON API for collecting Google reviews, managing distribution endpoints,
and relaying reviews to partner websites.

Errors are always returned as {"message": ..., "error": ...}.
"""

import json
import logging
import secrets
from typing import Callable, Optional
from contextlib import asynccontextmanager

import requests
from fastapi import FastAPI, Depends, Request, Header, Cookie, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from .. import __version__
from ..application import Distributor, SyncJob
from ..domain import (
    NotFoundError,
    ReviewRelayError,
    ReviewStatus,
    SyncSettings,
    UnauthorizedError,
    ValidationError,
    parse_review_payload,
)
from ..infrastructure.config import Settings, get_settings
from ..infrastructure.google import (
    GoogleOAuthClient,
    ReviewFetcher,
    TOKEN_COOKIE,
    build_fetcher,
    cookie_max_age,
    read_access_token,
)
from ..infrastructure.persistence import (
    Database,
    EndpointStore,
    ReviewStore,
    SettingsStore,
    SQLiteEndpointStore,
    SQLiteReviewStore,
    SQLiteSettingsStore,
    init_database,
)
from .schemas import (
    DistributeRequest,
    EndpointCreate,
    EndpointDelete,
    EndpointUpdate,
    StatusUpdate,
    SyncSettingsBody,
)

logging.basicConfig(level=get_settings().log_level.upper(), format=get_settings().log_format)
logger = logging.getLogger(__name__)

# ── Globals ────────────────────────────────────────────────────────
db: Optional[Database] = None
http_session: Optional[requests.Session] = None


# ── Lifespan ───────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    global db, http_session
    settings = get_settings()
    for issue in settings.validate():
        logger.warning(issue)
    db = init_database(str(settings.database_file))
    http_session = requests.Session()
    logger.info("Database ready")
    yield
    http_session.close()


app = FastAPI(
    title="Review Relay",
    description="Google review collection and distribution",
    version=__version__,
    lifespan=lifespan,
)


# ── Error handling ─────────────────────────────────────────────────

@app.exception_handler(ReviewRelayError)
async def review_relay_error_handler(request: Request, exc: ReviewRelayError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.error})")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse({"message": "Invalid request body", "error": details}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse({"message": "Internal server error", "error": str(exc)}, status_code=500)


# ── Dependencies ───────────────────────────────────────────────────

def get_config() -> Settings:
    return get_settings()


def get_database(config: Settings = Depends(get_config)) -> Database:
    global db
    if db is None:
        db = init_database(str(config.database_file))
    return db


def get_http_session() -> requests.Session:
    global http_session
    if http_session is None:
        http_session = requests.Session()
    return http_session


def get_review_store(database: Database = Depends(get_database)) -> ReviewStore:
    return SQLiteReviewStore(database)


def get_endpoint_store(database: Database = Depends(get_database)) -> EndpointStore:
    return SQLiteEndpointStore(database)


def get_settings_store(database: Database = Depends(get_database)) -> SettingsStore:
    return SQLiteSettingsStore(database)


def get_distributor(
    reviews: ReviewStore = Depends(get_review_store),
    endpoints: EndpointStore = Depends(get_endpoint_store),
    session: requests.Session = Depends(get_http_session),
    config: Settings = Depends(get_config),
) -> Distributor:
    return Distributor(reviews, endpoints, session=session, settings=config.distribution)


def get_fetcher_factory(
    session: requests.Session = Depends(get_http_session),
    config: Settings = Depends(get_config),
) -> Callable[[SyncSettings, Optional[str]], ReviewFetcher]:
    def factory(sync_settings: SyncSettings, access_token: Optional[str] = None) -> ReviewFetcher:
        return build_fetcher(sync_settings.google_place_id, access_token, session=session, google=config.google)
    return factory


def get_sync_job(
    reviews: ReviewStore = Depends(get_review_store),
    settings_store: SettingsStore = Depends(get_settings_store),
    fetcher_factory=Depends(get_fetcher_factory),
    distributor: Distributor = Depends(get_distributor),
) -> SyncJob:
    return SyncJob(reviews, settings_store, fetcher_factory, distributor)


def get_oauth_client(
    session: requests.Session = Depends(get_http_session),
    config: Settings = Depends(get_config),
) -> GoogleOAuthClient:
    return GoogleOAuthClient(config.google, session=session)


def require_api_key(
    x_api_key: Optional[str] = Header(None, alias="x-api-key"),
    config: Settings = Depends(get_config),
) -> None:
    if not config.api_key or not x_api_key or not secrets.compare_digest(x_api_key, config.api_key):
        raise UnauthorizedError("Unauthorized. Invalid or missing API key.")


def _newest_first(reviews):
    return sorted(reviews, key=lambda r: r.time, reverse=True)


# ── Service ────────────────────────────────────────────────────────

@app.get("/")
async def index():
    return {"name": "Review Relay", "version": __version__, "status": "ok"}


# ── Reviews ────────────────────────────────────────────────────────

@app.get("/reviews/fetch")
async def fetch_reviews(
    goog_tokens: Optional[str] = Cookie(None, alias=TOKEN_COOKIE),
    settings_store: SettingsStore = Depends(get_settings_store),
    fetcher_factory=Depends(get_fetcher_factory),
):
    """Pull reviews live from Google without storing them."""
    access_token = read_access_token(goog_tokens)
    fetcher = fetcher_factory(settings_store.get_sync_settings(), access_token)
    reviews = await run_in_threadpool(fetcher.fetch)
    return {"result": {"reviews": [r.to_dict() for r in reviews]}, "status": "OK"}


@app.get("/reviews")
async def list_reviews(reviews: ReviewStore = Depends(get_review_store)):
    return [r.to_dict() for r in _newest_first(reviews.get_all())]


@app.post("/reviews")
async def save_reviews(request: Request, reviews: ReviewStore = Depends(get_review_store)):
    """Merge posted reviews into the store, keeping operator-owned fields."""
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Expected an array of reviews", "Request body is not valid JSON")

    incoming = parse_review_payload(body)
    merged = reviews.merge_reviews(incoming)
    return [r.to_dict() for r in merged]


@app.put("/reviews")
async def update_review_status(body: StatusUpdate, reviews: ReviewStore = Depends(get_review_store)):
    review = reviews.update_status(body.id, ReviewStatus(body.status).value)
    if review is None:
        raise NotFoundError("Review not found")
    logger.info(f"Review {body.id} status -> {body.status}")
    return review.to_dict()


@app.post("/reviews/distribute")
async def distribute_reviews(body: DistributeRequest, distributor: Distributor = Depends(get_distributor)):
    result = await run_in_threadpool(distributor.distribute, body.review_ids, body.endpoint_ids)
    return result.to_dict()


@app.get("/reviews/published", dependencies=[Depends(require_api_key)])
async def published_reviews(
    limit: Optional[int] = Query(None),
    min_rating: Optional[int] = Query(None, alias="minRating"),
    reviews: ReviewStore = Depends(get_review_store),
):
    """Published reviews for partner sites (requires `x-api-key`)."""
    published = [r for r in _newest_first(reviews.get_all()) if r.is_published]
    if min_rating:
        published = [r for r in published if r.rating >= min_rating]
    if limit and limit > 0:
        published = published[:limit]
    return {"total": len(published), "reviews": [r.to_dict() for r in published]}


# ── Endpoints ──────────────────────────────────────────────────────

@app.get("/endpoints")
async def list_endpoints(endpoints: EndpointStore = Depends(get_endpoint_store)):
    return [e.to_dict() for e in endpoints.list_all()]


@app.post("/endpoints", status_code=201)
async def create_endpoint(body: EndpointCreate, endpoints: EndpointStore = Depends(get_endpoint_store)):
    endpoint = endpoints.create(body.name.strip(), body.url.strip(), body.active)
    return endpoint.to_dict()


@app.put("/endpoints")
async def update_endpoint(body: EndpointUpdate, endpoints: EndpointStore = Depends(get_endpoint_store)):
    endpoint = endpoints.update(body.id, name=body.name, url=body.url, active=body.active)
    if endpoint is None:
        raise NotFoundError("Endpoint not found")
    return endpoint.to_dict()


@app.delete("/endpoints")
async def delete_endpoint(body: EndpointDelete, endpoints: EndpointStore = Depends(get_endpoint_store)):
    if not endpoints.delete(body.id):
        raise NotFoundError("Endpoint not found")
    logger.info(f"Deleted endpoint {body.id}")
    return {"message": "Endpoint deleted successfully"}


# ── Settings & Sync ────────────────────────────────────────────────

@app.get("/settings")
async def read_sync_settings(settings_store: SettingsStore = Depends(get_settings_store)):
    return settings_store.get_sync_settings().to_dict()


@app.put("/settings")
async def save_sync_settings(body: SyncSettingsBody, settings_store: SettingsStore = Depends(get_settings_store)):
    return settings_store.save_sync_settings(body.to_domain()).to_dict()


@app.get("/tasks/sync-reviews")
async def sync_reviews(
    force: bool = False,
    goog_tokens: Optional[str] = Cookie(None, alias=TOKEN_COOKIE),
    job: SyncJob = Depends(get_sync_job),
):
    """Cron target: fetch, merge and optionally auto-distribute."""
    report = await run_in_threadpool(job.run, force, read_access_token(goog_tokens))
    return report.to_dict()


# ── Google OAuth ───────────────────────────────────────────────────

@app.get("/auth/google")
async def google_sign_in(oauth: GoogleOAuthClient = Depends(get_oauth_client)):
    return RedirectResponse(oauth.authorization_url())


@app.get("/auth/callback")
async def google_callback(
    code: Optional[str] = None,
    oauth: GoogleOAuthClient = Depends(get_oauth_client),
    config: Settings = Depends(get_config),
):
    if not code:
        raise ValidationError("Missing code")

    tokens = await run_in_threadpool(oauth.exchange_code, code)
    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=json.dumps(tokens),
        httponly=True,
        secure=config.is_production,
        path="/",
        max_age=cookie_max_age(tokens),
    )
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
