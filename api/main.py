"""
api/main.py -- FastAPI application entry point for the ranker API.

Run with:  uvicorn api.main:app --reload

Middleware stack:
  1. CORSMiddleware       -- CORS headers, any origin
  2. log_requests         -- one access-log line per request

Lifespan loads Settings once, builds the TokenService and both stores from
it, and disposes the stores on shutdown. Request handlers only ever see the
objects on app.state; nothing reads the environment after startup.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.rankings import router as rankings_router
from auth.errors import AuthError, Unauthenticated
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings
from rankings.store import RankingStore

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("ranker.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build application-level resources once and tear them down on shutdown.

    get_settings() raises ConfigurationError on a missing/short SECRET_KEY or
    a missing DATABASE_URL, which aborts startup before any request is served.
    """
    settings = get_settings()
    if settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    logger.info("Ranker API starting up")
    app.state.settings = settings
    app.state.token_service = TokenService(settings)
    app.state.user_store = UserStore(settings.database_url)
    app.state.ranking_store = RankingStore(settings.database_url)
    logger.info("Stores initialized")

    yield

    app.state.user_store.close()
    app.state.ranking_store.close()
    logger.info("Ranker API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Eurovision Ranker API",
    description="Store and compare personal Eurovision rankings.",
    version=__version__,
    lifespan=lifespan,
)

# Open to any origin; browser clients are served from other hosts.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Write one access line per request: method, path, status, latency, peer.

    Headers are never logged, so bearer tokens stay out of the log.
    """
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    peer = request.client.host if request.client else "-"
    logger.info(
        "%s %s -> %d (%.1fms) from %s", request.method, request.url.path, response.status_code, elapsed_ms, peer
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(rankings_router, prefix="/api/v1", tags=["Rankings"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every failure leaves the API as {"error": {"code", "message", "detail"?}}.
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render credential and authorization failures with no internal detail."""
    response = _error(exc.status_code, exc.code, exc.message)
    if isinstance(exc, Unauthenticated):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """A malformed registration, login or ranking body, or a non-UUID ranking id."""
    return _error(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) and the ranking lookup 404.

    A route that already raised {"code", "message"} keeps its own code.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return _error(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else, typically a database fault in one of the stores, is a bare 500."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=__version__)
