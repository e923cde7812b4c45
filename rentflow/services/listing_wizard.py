"""
Three-step vehicle listing wizard.

    step 0: category / title / description
    step 1: photos
    step 2: pricing / insurance  → submit()

No field is validated before advancing or submitting; the backend is
the only judge of a listing. submit() reports "done" whether or not
CreateListing succeeded. Failures reach ``FlowContext.on_error`` when a
hook is installed and are otherwise only logged.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable

from rentflow.exceptions import GatewayError
from rentflow.models.enums import (
    WIZARD_FIRST_STEP,
    WIZARD_LAST_STEP,
    StepOutcome,
    VehicleCategory,
)
from rentflow.models.request import CreateListingRequest
from rentflow.models.state import DRAFT_EDITABLE_FIELDS, ListingDraft
from rentflow.services.context import FlowContext

logger = logging.getLogger("rentflow")


def coerce_price(raw: Any) -> float:
    """Turn the typed price into a number, NaN when it is not one.

    Empty and whitespace-only input is NaN, never 0.
    """
    if isinstance(raw, bool):
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


class ListingWizard:
    """Accumulates a ListingDraft and submits it at the last step.

    Args:
        ctx: Gateway + liveness context from the session controller.
        on_done: Called when the wizard finishes (submitted or abandoned).
    """

    def __init__(self, ctx: FlowContext, on_done: Callable[[], None]) -> None:
        self._ctx = ctx
        self._on_done = on_done
        self.draft = ListingDraft()

    # ── Navigation ────────────────────────────────────────

    def advance(self) -> StepOutcome:
        if self.draft.step_index >= WIZARD_LAST_STEP:
            self._log_rejected("advance")
            return StepOutcome.REJECTED
        self.draft.step_index += 1
        return StepOutcome.OK

    def retreat(self) -> StepOutcome:
        if self.draft.step_index <= WIZARD_FIRST_STEP:
            self._log_rejected("retreat")
            return StepOutcome.REJECTED
        self.draft.step_index -= 1
        return StepOutcome.OK

    # ── Draft editing ─────────────────────────────────────

    def update_field(self, name: str, value: Any) -> StepOutcome:
        """Set one draft field, at any step, without validation."""
        if name not in DRAFT_EDITABLE_FIELDS:
            logger.warning(
                "Unknown listing draft field",
                extra={"step": "wizard_update", "field": name},
            )
            return StepOutcome.REJECTED
        if name == "category":
            try:
                value = VehicleCategory(value)
            except ValueError:
                logger.warning(
                    "Unknown vehicle category — draft unchanged",
                    extra={"step": "wizard_update", "field": name, "value": str(value)},
                )
                return StepOutcome.REJECTED
        elif name == "photos":
            value = [value] if isinstance(value, str) else list(value)
        setattr(self.draft, name, value)
        return StepOutcome.OK

    def add_photo(self, ref: str) -> None:
        self.draft.photos.append(ref)

    def toggle_insurance(self) -> bool:
        self.draft.has_insurance = not self.draft.has_insurance
        return self.draft.has_insurance

    def build_request(self) -> CreateListingRequest:
        draft = self.draft
        return CreateListingRequest(
            owner_id=self._ctx.settings.placeholder_user_id,
            type=draft.category,
            title=draft.title,
            description=draft.description,
            photos=list(draft.photos),
            has_insurance=draft.has_insurance,
            price_per_day=coerce_price(draft.price_per_day),
        )

    # ── Completion ────────────────────────────────────────

    async def submit(self) -> StepOutcome:
        """Send the draft and report done, whatever the backend says.

        Not guarded against repeats: calling again before the first call
        resolves sends a second CreateListing.
        """
        if self.draft.step_index != WIZARD_LAST_STEP:
            self._log_rejected("submit")
            return StepOutcome.REJECTED

        listing = self.build_request()
        outcome = StepOutcome.OK
        try:
            listing_id = await self._ctx.gateway.create_listing(listing)
        except GatewayError as exc:
            outcome = StepOutcome.FAILED
            logger.warning(
                "CreateListing failed — wizard closes anyway",
                extra={"step": "wizard_submit", "error": exc.message},
            )
            if self._ctx.is_live():
                self._ctx.report_error(exc)
        else:
            logger.info(
                "Listing created",
                extra={"step": "wizard_submit", "listing_id": listing_id},
            )

        if not self._ctx.is_live():
            logger.info(
                "Discarding CreateListing result for a closed wizard",
                extra={"step": "stale_response", "generation": self._ctx.generation},
            )
            return StepOutcome.STALE

        self._on_done()
        return outcome

    def abandon(self) -> None:
        """Leave the wizard without submitting."""
        logger.info(
            "Listing wizard abandoned",
            extra={"step": "wizard_abandon", "step_index": self.draft.step_index},
        )
        self._on_done()

    def _log_rejected(self, operation: str) -> None:
        logger.warning(
            "Wizard operation rejected",
            extra={
                "step": "wizard_precondition",
                "operation": operation,
                "step_index": self.draft.step_index,
            },
        )
