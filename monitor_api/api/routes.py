from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request

from monitor_api.models import Credentials, LogOrder, LogPageResponse, MetricsResponse

router = APIRouter()

BEARER_PREFIX = "bearer "


# ── request helpers ───────────────────────────────────


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def extract_credentials(request: Request) -> Credentials:
    """Token from ``X-Api-Token`` or ``Authorization: Bearer``, plus the trusted header."""
    token = request.headers.get("x-api-token")
    if not token:
        authorization = request.headers.get("authorization", "")
        if authorization.lower().startswith(BEARER_PREFIX):
            token = authorization[len(BEARER_PREFIX):].strip()

    trusted_identity = None
    header = request.app.state.settings.trusted_identity_header
    if header:
        trusted_identity = request.headers.get(header)

    return Credentials(token=token or None, trusted_identity=trusted_identity or None)


def admitted(request: Request) -> None:
    """Dependency applying the rate limit and auth checks to a route."""
    request.app.state.admission.admit(client_identity(request), extract_credentials(request))


# ── REST routes ───────────────────────────────────────


@router.get("/api/metrics", response_model=MetricsResponse)
async def get_metrics(request: Request) -> MetricsResponse:
    service = request.app.state.metrics_service
    snapshot = await service.get_metrics(client_identity(request), extract_credentials(request))
    return MetricsResponse.from_snapshot(snapshot)


@router.get(
    "/api/logs/{source_id}",
    response_model=LogPageResponse,
    dependencies=[Depends(admitted)],
)
async def get_logs(
    request: Request,
    source_id: str,
    limit: int | None = None,
    offset: int | None = Query(default=None, ge=0),
    order: LogOrder = LogOrder.ASC,
) -> LogPageResponse:
    service = request.app.state.log_service
    page = await service.get_page(source_id, offset=offset, limit=limit, order=order)
    return LogPageResponse.from_page(page)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
