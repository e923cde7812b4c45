"""
Application configuration — reads from environment variables.

Uses pydantic-settings to validate and type-check all config at startup.
Nothing here is required: every setting has a local-development default,
so a bare environment talks to a backend on localhost:8000.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All configuration for the rental client session core."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # the frontend build shares this .env
    )

    # ── Remote service ────────────────────────────────────
    backend_url: str = "http://localhost:8000"

    # None → no timeout; the session layer never gives up on a request
    gateway_timeout_ms: Optional[int] = None

    # ── Feature flags ────────────────────────────────────
    # USE_MOCKS swaps the HTTP gateway for the in-memory MockGateway.
    use_mocks: bool = False

    # ── Session flow ─────────────────────────────────────
    splash_dwell_ms: int = 2200
    placeholder_user_id: str = "me"
    support_greeting: str = "Hi! I'm here to help with bookings and listings."

    # ── Dev backend ──────────────────────────────────────
    dev_otp_code: str = "123456"

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    # ── Server (dev/testing only) ────────────────────────
    app_version: str = "0.1.0"
    cors_origins: str = "*"  # comma-separated in production


def get_settings() -> Settings:
    """Create and return the validated settings instance.

    Raises:
        ValidationError: If an env var is present but invalid.
    """
    return Settings()
