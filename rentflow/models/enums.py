"""
Enums and constants shared across the session controller and sub-flows.

These are CLOSED enums — Stage in particular mirrors the client's screens
one-to-one, so adding a value means adding a screen.
"""

from enum import Enum


class Stage(str, Enum):
    """Top-level stage of the client session.

    Transition graph:
        SPLASH       → AUTH          (timer)
        AUTH         → DASHBOARD     (auth sub-flow success)
        DASHBOARD    → LIST_VEHICLE | BOOKING | SUPPORT
        LIST_VEHICLE → DASHBOARD     (wizard submitted or abandoned)
        BOOKING      → DASHBOARD
        SUPPORT      → DASHBOARD

    No terminal stage: the session cycles through DASHBOARD indefinitely.
    """

    SPLASH = "splash"
    AUTH = "auth"
    DASHBOARD = "dashboard"
    LIST_VEHICLE = "list"
    BOOKING = "booking"
    SUPPORT = "support"


class AuthPhase(str, Enum):
    """Phase of the phone / one-time-code sub-flow."""

    PHONE_ENTRY = "phone_entry"
    CODE_ENTRY = "code_entry"


class VehicleCategory(str, Enum):
    BIKE = "bike"
    CAR = "car"


class Sender(str, Enum):
    """Author of a support chat transcript entry."""

    USER = "user"
    ASSISTANT = "bot"


class StepOutcome(str, Enum):
    """Result of a sub-flow operation, as seen by the caller.

    ok        — request succeeded (or the local mutation was applied)
    rejected  — precondition not met; no state change, no request sent
    failed    — gateway reported a failure
    stale     — the response arrived after the sub-flow was discarded
    """

    OK = "ok"
    REJECTED = "rejected"
    FAILED = "failed"
    STALE = "stale"


# ── Legal stage transitions ──────────────────────────────────
# Single source of truth — used by session_controller.py
LEGAL_TRANSITIONS: dict[Stage, set[Stage]] = {
    Stage.SPLASH: {Stage.AUTH},
    Stage.AUTH: {Stage.DASHBOARD},
    Stage.DASHBOARD: {Stage.LIST_VEHICLE, Stage.BOOKING, Stage.SUPPORT},
    Stage.LIST_VEHICLE: {Stage.DASHBOARD},
    Stage.BOOKING: {Stage.DASHBOARD},
    Stage.SUPPORT: {Stage.DASHBOARD},
}

# Stages reachable from DASHBOARD by explicit user navigation
NAVIGABLE_STAGES: frozenset[Stage] = frozenset(
    {Stage.LIST_VEHICLE, Stage.BOOKING, Stage.SUPPORT}
)

# ── Listing wizard ───────────────────────────────────────────
WIZARD_FIRST_STEP: int = 0
WIZARD_LAST_STEP: int = 2  # 0: category/title, 1: photos, 2: pricing/insurance
