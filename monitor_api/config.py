from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # --- app ---
    app_name: str = "Resource Monitor"
    dev_mode: bool = False  # loopback bypass + internal error detail

    # --- auth ---
    api_token: str | None = None
    trusted_identity_header: str | None = None  # set upstream by an auth proxy

    # --- metrics ---
    metrics_cache_ttl: float = 2.5  # seconds a snapshot stays fresh

    # --- rate limiting ---
    rate_limit_max_requests: int = 100
    rate_limit_window: float = 60.0  # seconds
    rate_limit_max_clients: int = 10_000

    # --- logs ---
    log_default_limit: int = 300
    log_max_limit: int = 300
    log_sources: dict[str, str] = {
        "nginx": "/var/log/nginx/access.log",
        "nginx-error": "/var/log/nginx/error.log",
        "syslog": "/var/log/syslog",
    }

    # --- server ---
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:5174"]

    model_config = {"env_file": ".env", "env_prefix": "MONITOR_"}


settings = Settings()
