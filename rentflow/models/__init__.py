"""
Rentflow models — enums, wire contracts and sub-flow working state.

Public API:
    from rentflow.models import (
        Stage, AuthPhase, VehicleCategory, Sender, StepOutcome,
        Identity, AuthFlowState, ListingDraft, BookingState, ChatEntry,
        CreateListingRequest, VehicleListing, LEGAL_TRANSITIONS,
    )
"""

from rentflow.models.enums import (
    LEGAL_TRANSITIONS,
    NAVIGABLE_STAGES,
    WIZARD_FIRST_STEP,
    WIZARD_LAST_STEP,
    AuthPhase,
    Sender,
    Stage,
    StepOutcome,
    VehicleCategory,
)
from rentflow.models.request import (
    ChatRequest,
    CreateListingRequest,
    SendCodeRequest,
    VerifyCodeRequest,
)
from rentflow.models.response import ChatReply, CreatedListing, VehicleListing
from rentflow.models.state import (
    AuthFlowState,
    BookingState,
    ChatEntry,
    Identity,
    ListingDraft,
)

__all__ = [
    # Enums
    "Stage",
    "AuthPhase",
    "VehicleCategory",
    "Sender",
    "StepOutcome",
    # Wire models
    "SendCodeRequest",
    "VerifyCodeRequest",
    "CreateListingRequest",
    "ChatRequest",
    "VehicleListing",
    "CreatedListing",
    "ChatReply",
    # Working state
    "Identity",
    "AuthFlowState",
    "ListingDraft",
    "BookingState",
    "ChatEntry",
    # Constants
    "LEGAL_TRANSITIONS",
    "NAVIGABLE_STAGES",
    "WIZARD_FIRST_STEP",
    "WIZARD_LAST_STEP",
]
