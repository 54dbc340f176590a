from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.routers import health, metrics
from app.services.activity_config import ActivitySettings

app = FastAPI(title="Collaborator Activity Pulse API", version="1.0.0")
logger = logging.getLogger("pulse.api.slow")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
logger.propagate = False
logger.setLevel(logging.INFO)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "1" if default else "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def _slow_request_ms_threshold() -> float:
    raw = os.getenv("API_SLOW_REQUEST_MS", "1500").strip()
    try:
        return max(25.0, float(raw))
    except ValueError:
        return 1500.0


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is None:
        return "unknown"
    return str(getattr(route, "name", "") or "unknown")


def _client_identity(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",", 1)[0].strip()
    remote = request.client.host if request.client and request.client.host else ""
    if remote:
        return remote
    return "unknown"


def _correlation_id(request: Request) -> str:
    for key in ("x-request-id", "x-vercel-id", "x-amzn-trace-id", "cf-ray"):
        value = request.headers.get(key)
        if value:
            return value
    return "none"


def _query_keys(request: Request) -> str:
    # Values are omitted: they can carry org names and login lists.
    return ",".join(sorted({key for key, _ in request.query_params.multi_items()}))


# Configure CORS
allowed_origins_str = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000")
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

# Configuration is read once per process; routers receive it via app.state.
app.state.activity_settings = ActivitySettings.from_env()


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""
    return RedirectResponse(url="/docs")


app.include_router(metrics.router, prefix="/api", tags=["metrics"])
app.include_router(health.router, prefix="/api", tags=["health"])


@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    start = time.perf_counter()
    status_code: int | None = None
    exc_name: str | None = None
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as exc:
        status_code = 500
        exc_name = exc.__class__.__name__
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if status_code is None:
            status_code = 500
        if elapsed_ms >= _slow_request_ms_threshold() or _env_flag("API_LOG_ALL_REQUESTS") or status_code >= 500:
            logger.warning(
                "slow_api_request method=%s path=%s route=%s status=%s elapsed_ms=%.2f query_keys=%s "
                "correlation=%s client=%s exception=%s",
                request.method,
                request.url.path,
                _route_label(request),
                status_code,
                elapsed_ms,
                _query_keys(request),
                _correlation_id(request),
                _client_identity(request),
                exc_name or "none",
            )
