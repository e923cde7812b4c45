"""
Mock implementation of the NetworkGateway.

Conforms to the protocol in rentflow.services.protocols and is activated
when USE_MOCKS=true in config. Also the workhorse of the test suite.

Mock behaviour:
    send_code          — always acks (unless failing)
    verify_code        — accepts only DEV_OTP_CODE for a phone that was sent a code
    create_listing     — stores the request, returns "veh-<n>"
    list_vehicles      — returns the seeded + created listings, in order
    send_chat_message  — keyword-routed canned replies

Test controls (not part of protocol):
    fail(op) / recover(op)   — make an operation raise GatewayError
    hold(op) / release(op)   — park calls to an operation until released
    calls / call_count(op)   — every invocation, in order
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from rentflow.exceptions import GatewayError
from rentflow.models.enums import VehicleCategory
from rentflow.models.request import CreateListingRequest
from rentflow.models.response import VehicleListing

logger = logging.getLogger("rentflow")

OPERATIONS: frozenset[str] = frozenset(
    {"send_code", "verify_code", "create_listing", "list_vehicles", "send_chat_message"}
)

DEFAULT_OTP_CODE = "123456"

_DEFAULT_CATALOG: tuple[VehicleListing, ...] = (
    VehicleListing(id="veh-seed-1", category=VehicleCategory.CAR, title="City Hatchback", price_per_day=35.0),
    VehicleListing(id="veh-seed-2", category=VehicleCategory.BIKE, title="Commuter Scooter", price_per_day=12.0),
)


class MockGateway:
    """Deterministic in-memory gateway.

    Keyword routing for chat (checked in order):
        - "help"                        → offer of help
        - "book" / "booking" / "rent"   → booking guidance
        - "list" / "listing" / "earn"   → listing guidance
        - "insurance"                   → insurance answer
        - (default)                     → generic acknowledgement
    """

    def __init__(
        self,
        *,
        otp_code: str = DEFAULT_OTP_CODE,
        catalog: Optional[list[VehicleListing]] = None,
        latency_s: float = 0.0,
    ) -> None:
        self.otp_code = otp_code
        self.latency_s = latency_s
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.created: list[CreateListingRequest] = []
        self._catalog: list[VehicleListing] = list(
            _DEFAULT_CATALOG if catalog is None else catalog
        )
        self._codes_sent: set[str] = set()
        self._failing: dict[str, str] = {}
        self._gates: dict[str, asyncio.Event] = {}

    # ── Protocol operations ───────────────────────────────

    async def send_code(self, phone: str) -> dict[str, Any]:
        await self._enter("send_code", phone=phone)
        self._codes_sent.add(phone)
        return {"status": "sent"}

    async def verify_code(self, phone: str, code: str) -> dict[str, Any]:
        await self._enter("verify_code", phone=phone, code=code)
        if phone not in self._codes_sent or code != self.otp_code:
            raise GatewayError(
                "verify_code: invalid code", operation="verify_code", status_code=400
            )
        return {"status": "verified"}

    async def create_listing(self, listing: CreateListingRequest) -> str:
        await self._enter("create_listing", listing=listing)
        self.created.append(listing)
        listing_id = f"veh-{len(self.created)}"
        self._catalog.append(
            VehicleListing(
                id=listing_id,
                category=listing.type,
                title=listing.title,
                price_per_day=listing.price_per_day,
            )
        )
        return listing_id

    async def list_vehicles(self) -> list[VehicleListing]:
        await self._enter("list_vehicles")
        return list(self._catalog)

    async def send_chat_message(self, user_id: str, message: str) -> str:
        await self._enter("send_chat_message", user_id=user_id, message=message)
        text = message.lower()

        if "help" in text:
            return "Sure, how can I help?"
        if any(kw in text for kw in ("book", "booking", "rent")):
            return "Open 'Rent a Vehicle' from the dashboard, pick a date and select a vehicle."
        if any(kw in text for kw in ("list", "listing", "earn")):
            return "Use 'List Your Vehicle' — three quick steps and you're live."
        if "insurance" in text:
            return "Insurance can be switched on in the pricing step of your listing."
        return "Thanks for reaching out! A support agent will follow up shortly."

    # ── Test helpers (not part of protocol) ───────────────

    def fail(self, operation: str, message: str = "injected failure") -> None:
        """Make every later call to ``operation`` raise GatewayError."""
        self._check(operation)
        self._failing[operation] = message

    def recover(self, operation: str) -> None:
        self._failing.pop(operation, None)

    def hold(self, operation: str) -> None:
        """Park calls to ``operation`` until release() is called."""
        self._check(operation)
        self._gates[operation] = asyncio.Event()

    def release(self, operation: str) -> None:
        gate = self._gates.pop(operation, None)
        if gate is not None:
            gate.set()

    def call_count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    def clear(self) -> None:
        """Forget calls and created listings. For testing only."""
        self.calls.clear()
        self.created.clear()
        self._codes_sent.clear()
        self._failing.clear()
        for operation in list(self._gates):
            self.release(operation)

    # ── Internals ─────────────────────────────────────────

    @staticmethod
    def _check(operation: str) -> None:
        if operation not in OPERATIONS:
            raise ValueError(f"Unknown gateway operation: {operation}")

    async def _enter(self, operation: str, **params: Any) -> None:
        """Record the call, then apply latency, hold gate and injected failure."""
        self.calls.append((operation, params))
        logger.debug(
            "MockGateway: call",
            extra={"step": "mock_gateway", "operation": operation},
        )

        if self.latency_s:
            await asyncio.sleep(self.latency_s)

        gate = self._gates.get(operation)
        if gate is not None:
            await gate.wait()

        message = self._failing.get(operation)
        if message is not None:
            raise GatewayError(f"{operation}: {message}", operation=operation)
