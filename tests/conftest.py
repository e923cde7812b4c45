"""
Shared test fixtures for the rentflow test suite.

Provides mock gateway setup and environment overrides.
"""

from __future__ import annotations

import asyncio
from typing import Generator

import pytest

from rentflow.config import Settings
from rentflow.dependencies import override_gateway, reset_services
from rentflow.services.context import FlowContext
from rentflow.services.mocks import MockGateway


@pytest.fixture(autouse=True)
def _mock_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Set USE_MOCKS=true and a zero splash dwell for all tests."""
    monkeypatch.setenv("USE_MOCKS", "true")
    monkeypatch.setenv("SPLASH_DWELL_MS", "0")
    yield
    reset_services()


@pytest.fixture()
def settings() -> Settings:
    return Settings(splash_dwell_ms=0, use_mocks=True)


@pytest.fixture()
def mock_gateway(settings: Settings) -> MockGateway:
    """Provide a fresh MockGateway and wire it into DI."""
    gateway = MockGateway(otp_code=settings.dev_otp_code)
    override_gateway(gateway)
    return gateway


@pytest.fixture()
def flow_ctx(mock_gateway: MockGateway, settings: Settings) -> FlowContext:
    """A standalone, always-live context for testing one sub-flow."""
    return FlowContext(gateway=mock_gateway, settings=settings)


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)
