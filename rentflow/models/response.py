"""
Pydantic models for results returned by the remote service.

VehicleListing   — one entry of GET /vehicles (read-only to the client)
CreatedListing   — result of POST /vehicles
ChatReply        — result of POST /support/chat
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from rentflow.models.enums import VehicleCategory


def _id_as_str(value: Any) -> Any:
    # Backends disagree on numeric vs string ids; the client treats ids as opaque.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class VehicleListing(BaseModel):
    """A vehicle offered for rent.

    Unknown fields (photos, owner, ratings …) are kept so the catalog view
    can show them without this model having to track the backend schema.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))
    # Categories this client does not know yet are kept as plain strings.
    category: Union[VehicleCategory, str] = Field(
        ...,
        validation_alias=AliasChoices("type", "category"),
        union_mode="left_to_right",
    )
    title: str = ""
    price_per_day: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return _id_as_str(v)


class CreatedListing(BaseModel):
    """Identifier of the listing the backend just persisted."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"))

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return _id_as_str(v)


class ChatReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reply: str
