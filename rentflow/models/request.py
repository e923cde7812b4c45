"""
Pydantic models for request bodies sent to the remote service.

Field names match the backend's JSON contract (snake_case), so
``model_dump(mode="json")`` is exactly what goes over the wire.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, Field, field_serializer

from rentflow.models.enums import VehicleCategory


class SendCodeRequest(BaseModel):
    """Body of POST /auth/send-otp."""

    phone: str


class VerifyCodeRequest(BaseModel):
    """Body of POST /auth/verify-otp."""

    phone: str
    code: str


class CreateListingRequest(BaseModel):
    """Body of POST /vehicles.

    No validation beyond types: empty titles and a NaN price are forwarded
    as-is and the backend decides whether to reject them.
    """

    owner_id: str = Field(
        ...,
        description="Placeholder owner identity, not derived from auth.",
    )
    type: VehicleCategory
    title: str = ""
    description: str = ""
    photos: list[str] = Field(default_factory=list)
    has_insurance: bool = False
    price_per_day: float = Field(
        ...,
        description="Daily price; NaN when the user's input was empty or non-numeric.",
    )

    @field_serializer("price_per_day", when_used="json")
    def _nan_as_null(self, value: float) -> float | None:
        """JSON has no NaN; send null like a browser's JSON.stringify would."""
        if math.isnan(value) or math.isinf(value):
            return None
        return value


class ChatRequest(BaseModel):
    """Body of POST /support/chat."""

    user_id: str
    message: str
