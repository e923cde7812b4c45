"""
Dependency injection — gateway wiring based on the USE_MOCKS config toggle.

USE_MOCKS=true  → MockGateway   (no backend needed)
USE_MOCKS=false → HttpGateway   (BACKEND_URL)

All gateway access goes through get_gateway().
The session state itself is never a singleton: each SessionController
owns its own SessionState.
"""

from __future__ import annotations

import logging
from typing import Optional

from rentflow.config import get_settings
from rentflow.services.mocks import MockGateway
from rentflow.services.protocols import NetworkGateway

logger = logging.getLogger("rentflow")

# ── Module-level singleton (initialized on first access) ──
_gateway: Optional[NetworkGateway] = None


def get_gateway() -> NetworkGateway:
    """Return the configured gateway (mock or HTTP).

    On first call, instantiates based on USE_MOCKS setting.
    Subsequent calls return the cached singleton.
    """
    global _gateway
    if _gateway is None:
        settings = get_settings()
        if settings.use_mocks:
            logger.info(
                "DI: Using MockGateway",
                extra={"step": "dependency_init"},
            )
            _gateway = MockGateway(otp_code=settings.dev_otp_code)
        else:
            from rentflow.services.gateway import HttpGateway

            logger.info(
                "DI: Using HttpGateway",
                extra={"step": "dependency_init", "base_url": settings.backend_url},
            )
            _gateway = HttpGateway(settings)
    return _gateway


def reset_services() -> None:
    """Reset the gateway singleton. For testing only — forces re-initialization."""
    global _gateway
    _gateway = None


def override_gateway(gateway: NetworkGateway) -> None:
    """Override the gateway singleton. For testing only."""
    global _gateway
    _gateway = gateway
