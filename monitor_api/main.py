from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from monitor_api.api.errors import error_response, install_error_handlers
from monitor_api.api.routes import router
from monitor_api.collectors import HostCollector
from monitor_api.config import Settings, settings
from monitor_api.engine import Admission, Authorizer, MetricsCache, PeriodicSweeper, RateLimiter
from monitor_api.engine.clock import Clock, system_clock
from monitor_api.errors import OriginNotAllowed
from monitor_api.services import LogService, MetricsService
from monitor_api.services.metrics_service import SnapshotSource

logger = logging.getLogger(__name__)


def init_state(
    app: FastAPI,
    cfg: Settings = settings,
    *,
    clock: Clock = system_clock,
    collector: SnapshotSource | None = None,
) -> None:
    """Build the process-local stores and services and hang them on ``app.state``."""
    rate_limiter = RateLimiter(
        max_requests=cfg.rate_limit_max_requests,
        window_seconds=cfg.rate_limit_window,
        max_clients=cfg.rate_limit_max_clients,
        clock=clock,
    )
    authorizer = Authorizer(
        api_token=cfg.api_token,
        trusted_identity_header=cfg.trusted_identity_header,
        dev_mode=cfg.dev_mode,
    )
    admission = Admission(rate_limiter, authorizer)

    app.state.settings = cfg
    app.state.rate_limiter = rate_limiter
    app.state.admission = admission
    app.state.metrics_service = MetricsService(
        admission=admission,
        cache=MetricsCache(ttl=cfg.metrics_cache_ttl, clock=clock),
        collector=collector or HostCollector(clock=clock),
    )
    app.state.log_service = LogService(
        cfg.log_sources,
        default_limit=cfg.log_default_limit,
        max_limit=cfg.log_max_limit,
    )

    if authorizer.misconfigured():
        logger.warning("No API token configured and dev mode is off: every API request will get 503")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── startup ───────────────────────────────────────
    init_state(app, settings)
    sweeper = PeriodicSweeper(
        "rate_limits",
        app.state.rate_limiter.sweep,
        interval=settings.rate_limit_window,
    )
    await sweeper.start()
    app.state.sweeper = sweeper

    logger.info(
        "Monitor backend started on %s:%d with %d log sources",
        settings.host, settings.port, len(settings.log_sources),
    )

    yield

    # ── shutdown ──────────────────────────────────────
    await sweeper.stop()
    logger.info("Monitor backend shut down")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def origin_and_cache_policy(request: Request, call_next):
    """Reject browser requests from unknown origins and mark every response no-store."""
    origin = request.headers.get("origin")
    if origin and origin not in request.app.state.settings.cors_origins:
        logger.warning("Rejected request from origin %s", origin)
        return error_response(request, OriginNotAllowed())

    response = await call_next(request)
    response.headers["Cache-Control"] = "no-store"
    return response


install_error_handlers(app)
app.include_router(router)
