"""
Vehicle browse / booking sub-flow.

Fetches the catalog once when the stage is entered. A failed fetch leaves
the catalog empty; there is no error state and no retry. Selected date
and vehicle are local only, since no booking endpoint exists.
"""

from __future__ import annotations

import logging
from typing import Optional

from rentflow.exceptions import GatewayError
from rentflow.models.enums import StepOutcome
from rentflow.models.response import VehicleListing
from rentflow.models.state import BookingState
from rentflow.services.context import FlowContext

logger = logging.getLogger("rentflow")


class BookingFlow:
    def __init__(self, ctx: FlowContext) -> None:
        self._ctx = ctx
        self.state = BookingState()

    @property
    def catalog(self) -> list[VehicleListing]:
        return self.state.catalog

    async def load(self) -> StepOutcome:
        try:
            vehicles = await self._ctx.gateway.list_vehicles()
        except GatewayError as exc:
            logger.warning(
                "ListVehicles failed — showing empty catalog",
                extra={"step": "booking_load", "error": exc.message},
            )
            return StepOutcome.FAILED

        if not self._ctx.is_live():
            logger.info(
                "Discarding catalog for a closed booking flow",
                extra={"step": "stale_response", "generation": self._ctx.generation},
            )
            return StepOutcome.STALE

        self.state.catalog = list(vehicles)
        logger.info(
            "Catalog loaded",
            extra={"step": "booking_load", "vehicle_count": len(vehicles)},
        )
        return StepOutcome.OK

    def select_date(self, value: Optional[str]) -> None:
        self.state.selected_date = value

    def select_vehicle(self, vehicle_id: Optional[str]) -> None:
        self.state.selected_vehicle_id = vehicle_id
