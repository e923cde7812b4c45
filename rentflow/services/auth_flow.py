"""
Phone / one-time-code authentication sub-flow.

    PHONE_ENTRY --[send_code ok]--> CODE_ENTRY --[verify_code ok]--> success

The ``pending`` flag is the only de-duplication in the client: while a
request for the current phase is outstanding, further submissions are
rejected without touching the gateway. Failures keep the phase, release
``pending`` and record the message in ``state.error``.
"""

from __future__ import annotations

import logging
from typing import Callable

from rentflow.exceptions import GatewayError
from rentflow.models.enums import AuthPhase, StepOutcome
from rentflow.models.state import AuthFlowState, Identity
from rentflow.services.context import FlowContext

logger = logging.getLogger("rentflow")


class AuthFlow:
    """Owns the phone number and code the user enters.

    Args:
        ctx: Gateway + liveness context from the session controller.
        on_success: Called once with the new Identity after verification.
    """

    def __init__(
        self,
        ctx: FlowContext,
        on_success: Callable[[Identity], None],
    ) -> None:
        self._ctx = ctx
        self._on_success = on_success
        self.state = AuthFlowState()

    async def submit_phone(self, phone: str) -> StepOutcome:
        state = self.state
        if not phone or state.pending or state.phase != AuthPhase.PHONE_ENTRY:
            self._log_rejected("submit_phone")
            return StepOutcome.REJECTED

        state.phone = phone
        state.pending = True
        state.error = None

        try:
            await self._ctx.gateway.send_code(phone)
        except GatewayError as exc:
            if not self._ctx.is_live():
                return self._stale("send_code")
            state.pending = False
            state.error = exc.message
            logger.warning(
                "SendCode failed — staying in phone entry",
                extra={"step": "auth_send_code", "error": exc.message},
            )
            return StepOutcome.FAILED

        if not self._ctx.is_live():
            return self._stale("send_code")

        state.pending = False
        state.phase = AuthPhase.CODE_ENTRY
        logger.info("Code sent", extra={"step": "auth_send_code"})
        return StepOutcome.OK

    async def submit_code(self, code: str) -> StepOutcome:
        state = self.state
        if not code or state.pending or state.phase != AuthPhase.CODE_ENTRY:
            self._log_rejected("submit_code")
            return StepOutcome.REJECTED

        state.code = code
        state.pending = True
        state.error = None

        try:
            await self._ctx.gateway.verify_code(state.phone, code)
        except GatewayError as exc:
            if not self._ctx.is_live():
                return self._stale("verify_code")
            state.pending = False
            state.error = exc.message
            logger.warning(
                "VerifyCode failed — staying in code entry",
                extra={"step": "auth_verify_code", "error": exc.message},
            )
            return StepOutcome.FAILED

        if not self._ctx.is_live():
            return self._stale("verify_code")

        state.pending = False
        logger.info("Code verified", extra={"step": "auth_verify_code"})
        self._on_success(Identity(phone=state.phone))
        return StepOutcome.OK

    def _log_rejected(self, operation: str) -> None:
        logger.warning(
            "Auth submission rejected",
            extra={
                "step": "auth_precondition",
                "operation": operation,
                "phase": self.state.phase.value,
                "pending": self.state.pending,
            },
        )

    def _stale(self, operation: str) -> StepOutcome:
        logger.info(
            "Discarding response for a closed auth flow",
            extra={
                "step": "stale_response",
                "operation": operation,
                "generation": self._ctx.generation,
            },
        )
        return StepOutcome.STALE
