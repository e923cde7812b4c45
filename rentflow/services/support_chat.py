"""
Support chat sub-flow.

The transcript is append-only and starts with the configured assistant
greeting. send_message() is two separate transitions:

    1. append the user entry (unconditional, before the request)
    2. append the assistant reply (only if SendChatMessage succeeded)

A failed request appends nothing and shows nothing unless an on_error
hook is installed on the FlowContext.
"""

from __future__ import annotations

import logging

from rentflow.exceptions import GatewayError
from rentflow.models.enums import Sender, StepOutcome
from rentflow.models.state import ChatEntry
from rentflow.services.context import FlowContext

logger = logging.getLogger("rentflow")


class SupportChat:
    def __init__(self, ctx: FlowContext) -> None:
        self._ctx = ctx
        self.transcript: list[ChatEntry] = [
            ChatEntry(sender=Sender.ASSISTANT, text=ctx.settings.support_greeting)
        ]

    async def send_message(self, text: str) -> StepOutcome:
        if not text:
            return StepOutcome.REJECTED

        self.transcript.append(ChatEntry(sender=Sender.USER, text=text))

        try:
            reply = await self._ctx.gateway.send_chat_message(
                self._ctx.settings.placeholder_user_id, text
            )
        except GatewayError as exc:
            logger.warning(
                "SendChatMessage failed — no reply appended",
                extra={"step": "chat_send", "error": exc.message},
            )
            if not self._ctx.is_live():
                return StepOutcome.STALE
            self._ctx.report_error(exc)
            return StepOutcome.FAILED

        if not self._ctx.is_live():
            logger.info(
                "Discarding chat reply for a closed support flow",
                extra={"step": "stale_response", "generation": self._ctx.generation},
            )
            return StepOutcome.STALE

        self.transcript.append(ChatEntry(sender=Sender.ASSISTANT, text=reply))
        return StepOutcome.OK
