"""
HTTP-backed NetworkGateway — talks to the rental backend with httpx.

Conforms to the NetworkGateway protocol defined in protocols.py.

Endpoints (relative to BACKEND_URL):
    POST /auth/send-otp      {phone}
    POST /auth/verify-otp    {phone, code}
    POST /vehicles           CreateListingRequest
    GET  /vehicles           → [VehicleListing, ...]
    POST /support/chat       {user_id, message} → {reply}

Failure policy:
    - One attempt per call, never retried.
    - httpx transport errors, non-2xx statuses, non-JSON bodies and
      contract mismatches all become GatewayError.
    - No timeout unless GATEWAY_TIMEOUT_MS is set.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from rentflow.config import Settings, get_settings
from rentflow.exceptions import GatewayError
from rentflow.models.request import (
    ChatRequest,
    CreateListingRequest,
    SendCodeRequest,
    VerifyCodeRequest,
)
from rentflow.models.response import ChatReply, CreatedListing, VehicleListing

logger = logging.getLogger("rentflow")

_ENTRIES_ADAPTER = TypeAdapter(list[Any])


class HttpGateway:
    """Real NetworkGateway over HTTP.

    Owns one ``httpx.AsyncClient`` for its lifetime; close it with
    ``aclose()`` or use the gateway as an async context manager.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        settings = settings or get_settings()
        timeout = (
            settings.gateway_timeout_ms / 1000.0
            if settings.gateway_timeout_ms is not None
            else None
        )
        self._base_url = settings.backend_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
        )

        logger.info(
            "HttpGateway initialized",
            extra={
                "step": "gateway_init",
                "base_url": self._base_url,
                "timeout_ms": settings.gateway_timeout_ms,
            },
        )

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Protocol operations ───────────────────────────────

    async def send_code(self, phone: str) -> dict[str, Any]:
        body = SendCodeRequest(phone=phone).model_dump(mode="json")
        data = await self._request("send_code", "POST", "/auth/send-otp", body=body)
        return data if isinstance(data, dict) else {"ack": data}

    async def verify_code(self, phone: str, code: str) -> dict[str, Any]:
        body = VerifyCodeRequest(phone=phone, code=code).model_dump(mode="json")
        data = await self._request("verify_code", "POST", "/auth/verify-otp", body=body)
        return data if isinstance(data, dict) else {"ack": data}

    async def create_listing(self, listing: CreateListingRequest) -> str:
        data = await self._request(
            "create_listing",
            "POST",
            "/vehicles",
            body=listing.model_dump(mode="json"),
        )
        created = self._parse("create_listing", CreatedListing.model_validate, data)
        return created.id

    async def list_vehicles(self) -> list[VehicleListing]:
        data = await self._request("list_vehicles", "GET", "/vehicles")
        entries = self._parse("list_vehicles", _ENTRIES_ADAPTER.validate_python, data)

        # One malformed entry must not hide the rest of the catalog.
        catalog: list[VehicleListing] = []
        for index, entry in enumerate(entries):
            try:
                catalog.append(VehicleListing.model_validate(entry))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed catalog entry",
                    extra={
                        "step": "gateway_parse_error",
                        "operation": "list_vehicles",
                        "index": index,
                        "error": str(exc),
                    },
                )
        return catalog

    async def send_chat_message(self, user_id: str, message: str) -> str:
        body = ChatRequest(user_id=user_id, message=message).model_dump(mode="json")
        data = await self._request("send_chat_message", "POST", "/support/chat", body=body)
        return self._parse("send_chat_message", ChatReply.model_validate, data).reply

    # ── Internals ─────────────────────────────────────────

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Issue one HTTP request and return the decoded JSON body."""
        logger.debug(
            "Gateway request",
            extra={"step": "gateway_request", "operation": operation, "path": path},
        )
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.HTTPError as exc:
            logger.warning(
                "Gateway transport error",
                extra={
                    "step": "gateway_transport_error",
                    "operation": operation,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise GatewayError(
                f"{operation}: transport error: {exc}", operation=operation
            ) from exc

        if not response.is_success:
            logger.warning(
                "Gateway non-success response",
                extra={
                    "step": "gateway_http_error",
                    "operation": operation,
                    "status_code": response.status_code,
                },
            )
            raise GatewayError(
                f"{operation}: backend returned {response.status_code}",
                operation=operation,
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(
                f"{operation}: response is not JSON",
                operation=operation,
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _parse(operation: str, validate: Any, data: Any) -> Any:
        try:
            return validate(data)
        except ValidationError as exc:
            logger.warning(
                "Gateway response does not match contract",
                extra={
                    "step": "gateway_parse_error",
                    "operation": operation,
                    "error": str(exc),
                    "raw_content": json.dumps(data, default=str)[:300],
                },
            )
            raise GatewayError(
                f"{operation}: unexpected response shape", operation=operation
            ) from exc
