"""
Working state owned by the session controller and its sub-flows.

Plain dataclasses: these never cross the wire, and each instance belongs
to exactly one sub-flow, which is thrown away when its stage is left.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from rentflow.models.enums import AuthPhase, Sender, VehicleCategory
from rentflow.models.response import VehicleListing


@dataclass(frozen=True)
class Identity:
    """Authenticated user. Set once by the auth sub-flow, never mutated."""

    phone: str


@dataclass
class AuthFlowState:
    phase: AuthPhase = AuthPhase.PHONE_ENTRY
    phone: str = ""
    code: str = ""
    # True while SendCode / VerifyCode for the current phase is outstanding
    pending: bool = False
    # Message of the last gateway failure, cleared on the next submission
    error: Optional[str] = None


@dataclass
class ListingDraft:
    """Listing being assembled across the three wizard steps.

    ``price_per_day`` holds whatever the user typed (usually a string);
    it is only coerced to a number when the draft is submitted.
    """

    category: VehicleCategory = VehicleCategory.CAR
    title: str = ""
    description: str = ""
    photos: list[str] = field(default_factory=list)
    has_insurance: bool = False
    price_per_day: Union[str, int, float] = ""
    step_index: int = 0


# Draft fields a caller may set through update_field()
DRAFT_EDITABLE_FIELDS: frozenset[str] = frozenset(
    {"category", "title", "description", "photos", "has_insurance", "price_per_day"}
)


@dataclass
class BookingState:
    catalog: list[VehicleListing] = field(default_factory=list)
    selected_date: Optional[str] = None
    selected_vehicle_id: Optional[str] = None


@dataclass(frozen=True)
class ChatEntry:
    sender: Sender
    text: str
