"""
HttpGateway tests.

All HTTP traffic goes through httpx.MockTransport — no sockets are opened.

Coverage:
    - Request shape for each of the five operations
    - Result parsing, malformed catalog entries skipped one by one
    - Failure mapping: transport errors, non-2xx, non-JSON, bad shape
    - Single attempt per call (no retry)
"""

from __future__ import annotations

import json
import math
from typing import Any, Callable

import httpx
import pytest

from rentflow.config import Settings
from rentflow.exceptions import GatewayError
from rentflow.models.enums import StepOutcome, VehicleCategory
from rentflow.models.request import CreateListingRequest
from rentflow.services.booking import BookingFlow
from rentflow.services.context import FlowContext
from rentflow.services.gateway import HttpGateway


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def recorded() -> list[httpx.Request]:
    return []


@pytest.fixture()
def make_gateway(recorded: list[httpx.Request]):
    """Build an HttpGateway whose transport calls ``handler``."""

    def _make(handler: Handler, **settings_overrides: Any) -> HttpGateway:
        def _record(request: httpx.Request) -> httpx.Response:
            recorded.append(request)
            return handler(request)

        settings = Settings(backend_url="http://backend.test/", **settings_overrides)
        gateway = HttpGateway(settings, transport=httpx.MockTransport(_record))
        return gateway

    return _make


def _body(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


# ═══════════════════════════════════════════════════════════
#  1. Happy paths
# ═══════════════════════════════════════════════════════════


class TestOperations:
    async def test_send_code(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json={"status": "sent"}))
        ack = await gateway.send_code("+15551234567")

        assert ack == {"status": "sent"}
        request = recorded[0]
        assert request.method == "POST"
        assert str(request.url) == "http://backend.test/auth/send-otp"
        assert _body(request) == {"phone": "+15551234567"}

    async def test_verify_code(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json={"ok": True}))
        await gateway.verify_code("+15551234567", "123456")

        assert recorded[0].url.path == "/auth/verify-otp"
        assert _body(recorded[0]) == {"phone": "+15551234567", "code": "123456"}

    async def test_empty_body_is_an_ack(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(204))
        assert await gateway.verify_code("+1", "1") == {}

    async def test_non_object_ack_is_wrapped(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json=True))
        assert await gateway.send_code("+1") == {"ack": True}

    async def test_create_listing(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(201, json={"id": "veh-9"}))
        listing = CreateListingRequest(
            owner_id="me", type="car", title="Sedan", price_per_day=45
        )
        assert await gateway.create_listing(listing) == "veh-9"

        body = _body(recorded[0])
        assert recorded[0].url.path == "/vehicles"
        assert body["type"] == "car"
        assert body["price_per_day"] == 45
        assert body["owner_id"] == "me"
        assert body["photos"] == []

    async def test_create_listing_nan_price_sent_as_null(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json={"id": 1}))
        listing = CreateListingRequest(owner_id="me", type="bike", price_per_day=math.nan)
        assert await gateway.create_listing(listing) == "1"
        assert _body(recorded[0])["price_per_day"] is None

    async def test_list_vehicles(self, make_gateway, recorded) -> None:
        payload = [
            {"id": "a", "type": "car", "title": "Sedan", "price_per_day": 45},
            {"id": "b", "type": "bike", "title": "Scooter", "price_per_day": 12},
        ]
        gateway = make_gateway(lambda r: httpx.Response(200, json=payload))
        vehicles = await gateway.list_vehicles()

        assert recorded[0].method == "GET"
        assert [v.id for v in vehicles] == ["a", "b"]
        assert vehicles[1].title == "Scooter"

    async def test_list_vehicles_keeps_unknown_category(self, make_gateway) -> None:
        payload = [
            {"id": "v1", "type": "car", "title": "Sedan", "price_per_day": 45},
            {"id": "v2", "type": "scooter", "title": "Vespa", "price_per_day": 9},
        ]
        gateway = make_gateway(lambda r: httpx.Response(200, json=payload))
        vehicles = await gateway.list_vehicles()

        assert [v.id for v in vehicles] == ["v1", "v2"]
        assert vehicles[0].category == VehicleCategory.CAR
        assert vehicles[1].category == "scooter"

    async def test_list_vehicles_skips_only_malformed_entries(self, make_gateway) -> None:
        payload = [
            {"id": "v1", "type": "car", "title": "Sedan"},
            {"type": "bike", "title": "No id"},
            "not-an-object",
            {"id": "v3", "type": "bike", "title": "Scooter"},
        ]
        gateway = make_gateway(lambda r: httpx.Response(200, json=payload))
        vehicles = await gateway.list_vehicles()
        assert [v.id for v in vehicles] == ["v1", "v3"]

    async def test_booking_shows_mixed_catalog(self, make_gateway) -> None:
        payload = [
            {"id": "v1", "type": "car", "title": "Sedan"},
            {"id": "v2", "type": "scooter", "title": "Vespa"},
        ]
        gateway = make_gateway(lambda r: httpx.Response(200, json=payload))
        flow = BookingFlow(FlowContext(gateway=gateway, settings=Settings()))

        assert await flow.load() == StepOutcome.OK
        assert [v.title for v in flow.catalog] == ["Sedan", "Vespa"]

    async def test_send_chat_message(self, make_gateway, recorded) -> None:
        gateway = make_gateway(
            lambda r: httpx.Response(200, json={"reply": "Sure, how can I help?"})
        )
        reply = await gateway.send_chat_message("me", "help")

        assert reply == "Sure, how can I help?"
        assert recorded[0].url.path == "/support/chat"
        assert _body(recorded[0]) == {"user_id": "me", "message": "help"}

    async def test_context_manager_closes_client(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json=[]))
        async with gateway:
            assert await gateway.list_vehicles() == []
        assert gateway._client.is_closed


# ═══════════════════════════════════════════════════════════
#  2. Failure mapping
# ═══════════════════════════════════════════════════════════


class TestFailures:
    async def test_transport_error(self, make_gateway) -> None:
        def _down(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(_down)
        with pytest.raises(GatewayError) as exc_info:
            await gateway.send_code("+1")
        assert exc_info.value.operation == "send_code"
        assert exc_info.value.status_code is None

    @pytest.mark.parametrize("status", [400, 401, 404, 429, 500, 503])
    async def test_non_success_status(self, make_gateway, status: int) -> None:
        gateway = make_gateway(lambda r: httpx.Response(status, json={"detail": "no"}))
        with pytest.raises(GatewayError) as exc_info:
            await gateway.verify_code("+1", "000000")
        assert exc_info.value.status_code == status

    async def test_non_json_body(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(GatewayError, match="not JSON"):
            await gateway.list_vehicles()

    async def test_wrong_shape(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json={"vehicles": []}))
        with pytest.raises(GatewayError, match="unexpected response shape"):
            await gateway.list_vehicles()

    async def test_chat_without_reply(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json={"message": "hi"}))
        with pytest.raises(GatewayError):
            await gateway.send_chat_message("me", "hi")

    async def test_single_attempt(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(503))
        with pytest.raises(GatewayError):
            await gateway.send_chat_message("me", "help")
        assert len(recorded) == 1


# ═══════════════════════════════════════════════════════════
#  3. Configuration
# ═══════════════════════════════════════════════════════════


class TestConfiguration:
    async def test_no_timeout_by_default(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json=[]))
        assert gateway._client.timeout == httpx.Timeout(None)

    async def test_timeout_from_settings(self, make_gateway) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json=[]), gateway_timeout_ms=1500)
        assert gateway._client.timeout == httpx.Timeout(1.5)

    async def test_base_url_trailing_slash_trimmed(self, make_gateway, recorded) -> None:
        gateway = make_gateway(lambda r: httpx.Response(200, json=[]))
        await gateway.list_vehicles()
        assert str(recorded[0].url) == "http://backend.test/vehicles"
