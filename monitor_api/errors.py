from __future__ import annotations


class MonitorError(Exception):
    """Base for every failure the API turns into a structured JSON body.

    ``error`` is the stable tag clients switch on, ``message`` is safe to show
    to users and ``detail`` carries internal text that is only exposed in
    development mode.
    """

    status_code: int = 500
    error: str = "InternalError"
    message: str = "Unexpected server error"
    retryable: bool = False

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        if message is not None:
            self.message = message
        self.detail = detail
        super().__init__(self.message)


class Unauthorized(MonitorError):
    status_code = 401
    error = "Unauthorized"
    message = "Missing or invalid API token"


class OriginNotAllowed(MonitorError):
    status_code = 403
    error = "OriginNotAllowed"
    message = "Origin not allowed by CORS policy"


class ServiceUnavailable(MonitorError):
    status_code = 503
    error = "ServiceUnavailable"
    message = "API token is not configured on the server"


class RateLimited(MonitorError):
    status_code = 429
    error = "RateLimited"
    message = "Too many requests, please wait a moment"
    retryable = True

    def __init__(self, retry_after_seconds: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class UnknownSource(MonitorError):
    status_code = 404
    error = "UnknownSource"
    message = "Unknown log source"

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Unknown log source: {source_id}")
        self.source_id = source_id


class NotFound(MonitorError):
    status_code = 404
    error = "NotFound"
    message = "Route not found"


class InvalidRequest(MonitorError):
    status_code = 400
    error = "InvalidRequest"
    message = "Invalid request parameters"


class MetricsUnavailable(MonitorError):
    error = "MetricsUnavailable"
    message = "Failed to gather system metrics"
    retryable = True


class LogUnavailable(MonitorError):
    error = "LogUnavailable"
    message = "Failed to read log source"


def retryable_error_tags() -> frozenset[str]:
    """Tags of every error a client may retry after waiting."""
    tags = set()
    pending = [MonitorError]
    while pending:
        cls = pending.pop()
        if cls.retryable:
            tags.add(cls.error)
        pending.extend(cls.__subclasses__())
    return frozenset(tags)
