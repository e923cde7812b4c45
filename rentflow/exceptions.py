"""
Exception raised by NetworkGateway implementations.

Sub-flows catch this and decide what the user sees:

    SendCode / VerifyCode        → phase unchanged, pending released
    CreateListing                → wizard still reports done
    ListVehicles                 → catalog stays empty
    SendChatMessage              → no assistant entry appended
"""

from typing import Optional


class GatewayError(Exception):
    """Raised when a remote operation fails.

    Causes:
        - Network unreachable / connection reset (httpx transport error)
        - Non-2xx response from the backend
        - Response body that is not JSON or does not match the contract
        - Injected failure in MockGateway

    Attributes:
        operation: Gateway operation name, e.g. "send_code".
        status_code: HTTP status if the backend answered, else None.
    """

    def __init__(
        self,
        message: str = "Remote service unavailable",
        *,
        operation: str = "unknown",
        status_code: Optional[int] = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.status_code = status_code
        super().__init__(self.message)
