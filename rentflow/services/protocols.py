"""
Service protocol (interface) for the remote rental service.

Both the HTTP and the mock implementation conform to this protocol,
so the session core can be swapped via the USE_MOCKS config toggle.

Protocols defined:
    NetworkGateway — the five request/response operations of the client
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from rentflow.models.request import CreateListingRequest
from rentflow.models.response import VehicleListing


@runtime_checkable
class NetworkGateway(Protocol):
    """Protocol for the backing rental service.

    Every operation is a single attempt: no retry, no caching, no timeout
    policy of its own. Any failure (transport or non-success response)
    is raised as GatewayError.

    Implementations:
        - HttpGateway  — httpx against BACKEND_URL
        - MockGateway  — in-memory, deterministic
    """

    async def send_code(self, phone: str) -> dict[str, Any]:
        """Ask the backend to deliver a one-time code to ``phone``.

        Returns:
            The backend's acknowledgement (opaque to the client).

        Raises:
            GatewayError: If the request fails.
        """
        ...

    async def verify_code(self, phone: str, code: str) -> dict[str, Any]:
        """Check ``code`` against the one delivered to ``phone``.

        Success means the code is valid; there is no partial result.

        Raises:
            GatewayError: If the request fails or the code is rejected.
        """
        ...

    async def create_listing(self, listing: CreateListingRequest) -> str:
        """Persist a new vehicle listing.

        Returns:
            Identifier of the created listing.

        Raises:
            GatewayError: If the request fails.
        """
        ...

    async def list_vehicles(self) -> list[VehicleListing]:
        """Fetch the full catalog snapshot, in backend order.

        Raises:
            GatewayError: If the request fails.
        """
        ...

    async def send_chat_message(self, user_id: str, message: str) -> str:
        """Send one support message and return the assistant's reply.

        Raises:
            GatewayError: If the request fails.
        """
        ...
