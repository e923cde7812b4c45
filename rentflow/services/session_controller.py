"""
Session flow controller — the root state machine of the client.

Owns the current Stage and the Identity, and builds a fresh sub-flow on
every stage entry. Sub-flows report back through callbacks bound to the
generation they were created in; a callback from an older generation is
a late response for a discarded instance and is ignored.

Public API:
    validate_transition(current, proposed) → (stage, warnings)
    SessionController(gateway, settings)
        .start() / .finish_splash()
        .navigate(stage) / .back()
        .join() / .aclose()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Optional, Union

from rentflow.config import Settings, get_settings
from rentflow.dependencies import get_gateway
from rentflow.exceptions import GatewayError
from rentflow.models.enums import LEGAL_TRANSITIONS, NAVIGABLE_STAGES, Stage
from rentflow.models.state import Identity
from rentflow.services.auth_flow import AuthFlow
from rentflow.services.booking import BookingFlow
from rentflow.services.context import FlowContext
from rentflow.services.listing_wizard import ListingWizard
from rentflow.services.protocols import NetworkGateway
from rentflow.services.support_chat import SupportChat

logger = logging.getLogger("rentflow")

# Exactly one of these is live at a time; SPLASH and DASHBOARD have none.
SubFlow = Union[AuthFlow, ListingWizard, BookingFlow, SupportChat, None]


@dataclass
class SessionState:
    """Everything the controller owns. Nothing survives a restart."""

    stage: Stage = Stage.SPLASH
    identity: Optional[Identity] = None
    # Bumped on every stage entry; tags the live sub-flow
    generation: int = 0
    flow: SubFlow = None


# ═══════════════════════════════════════════════════════════
#  Stage transition validation
# ═══════════════════════════════════════════════════════════


def validate_transition(
    current: Stage,
    proposed: Stage,
) -> tuple[Stage, list[str]]:
    """Validate a proposed stage transition against LEGAL_TRANSITIONS.

    Returns:
        (approved_stage, list_of_warnings) — the current stage and a
        warning when the move is not in the graph.
    """
    warnings: list[str] = []
    legal_targets = LEGAL_TRANSITIONS.get(current, set())
    if proposed not in legal_targets:
        warnings.append(
            f"Illegal transition {current.value} → {proposed.value}. "
            f"Legal targets: {sorted(s.value for s in legal_targets)}. "
            f"Keeping {current.value}."
        )
        return current, warnings
    return proposed, warnings


# ═══════════════════════════════════════════════════════════
#  Controller
# ═══════════════════════════════════════════════════════════


class SessionController:
    """Top-level stage machine.

    Navigation methods are synchronous and return whether the transition
    happened; they never raise. Entering BOOKING schedules the catalog
    fetch on the running event loop, so drive the controller from inside
    one.

    Args:
        gateway: Remote service; defaults to the DI-configured gateway.
        settings: Defaults to get_settings().
        on_error: Optional hook passed to the listing wizard and support
            chat; without it their gateway failures stay silent.
    """

    def __init__(
        self,
        gateway: Optional[NetworkGateway] = None,
        settings: Optional[Settings] = None,
        *,
        on_error: Optional[Callable[[GatewayError], None]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._gateway = gateway if gateway is not None else get_gateway()
        self._on_error = on_error
        self.state = SessionState()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._splash_started = False

    # ── Read access ───────────────────────────────────────

    @property
    def stage(self) -> Stage:
        return self.state.stage

    @property
    def identity(self) -> Optional[Identity]:
        return self.state.identity

    @property
    def flow(self) -> SubFlow:
        return self.state.flow

    @property
    def auth(self) -> Optional[AuthFlow]:
        return self.state.flow if isinstance(self.state.flow, AuthFlow) else None

    @property
    def wizard(self) -> Optional[ListingWizard]:
        return self.state.flow if isinstance(self.state.flow, ListingWizard) else None

    @property
    def booking(self) -> Optional[BookingFlow]:
        return self.state.flow if isinstance(self.state.flow, BookingFlow) else None

    @property
    def support(self) -> Optional[SupportChat]:
        return self.state.flow if isinstance(self.state.flow, SupportChat) else None

    # ── Splash ────────────────────────────────────────────

    def start(self) -> Optional[asyncio.Task[Any]]:
        """Arm the splash timer. Only the first call has an effect."""
        if self._splash_started:
            return None
        self._splash_started = True
        logger.info(
            "Session started",
            extra={"step": "session_start", "splash_dwell_ms": self._settings.splash_dwell_ms},
        )
        return self._spawn(self._splash_timer)

    async def _splash_timer(self) -> None:
        await asyncio.sleep(self._settings.splash_dwell_ms / 1000.0)
        self.finish_splash()

    def finish_splash(self) -> bool:
        """SPLASH → AUTH. A no-op once the splash has been left."""
        if self.state.stage != Stage.SPLASH:
            return False
        return self._transition(Stage.AUTH)

    # ── User navigation ───────────────────────────────────

    def navigate(self, target: Stage) -> bool:
        """DASHBOARD → LIST_VEHICLE | BOOKING | SUPPORT."""
        if target not in NAVIGABLE_STAGES:
            logger.warning(
                "Navigation target is not a dashboard destination",
                extra={"step": "navigate", "stage": self.state.stage.value, "target": target.value},
            )
            return False
        return self._transition(target)

    def back(self) -> bool:
        """Return to DASHBOARD from a dashboard destination.

        In LIST_VEHICLE this abandons the wizard, which reports done.
        """
        wizard = self.wizard
        if wizard is not None:
            wizard.abandon()
            return self.state.stage == Stage.DASHBOARD
        if self.state.stage in (Stage.BOOKING, Stage.SUPPORT):
            return self._transition(Stage.DASHBOARD)
        logger.warning(
            "Back navigation ignored",
            extra={"step": "navigate_back", "stage": self.state.stage.value},
        )
        return False

    # ── Sub-flow reports ──────────────────────────────────

    def _on_auth_success(self, generation: int, identity: Identity) -> None:
        if not self._is_current(generation):
            self._log_stale_report("auth_success", generation)
            return
        if self.state.identity is not None:
            logger.warning(
                "Identity already set — ignoring second auth success",
                extra={"step": "auth_success"},
            )
            return
        self.state.identity = identity
        self._transition(Stage.DASHBOARD)

    def _on_listing_done(self, generation: int) -> None:
        if not self._is_current(generation):
            self._log_stale_report("listing_done", generation)
            return
        self._transition(Stage.DASHBOARD)

    # ── Transition core ───────────────────────────────────

    def _transition(self, target: Stage) -> bool:
        state = self.state
        approved, warnings = validate_transition(state.stage, target)
        for w in warnings:
            logger.warning(
                "Stage transition rejected",
                extra={"step": "stage_transition", "warning": w},
            )
        if approved != target:
            return False

        previous = state.stage
        state.generation += 1
        state.stage = target
        state.flow = self._build_flow(target, state.generation)

        logger.info(
            "Stage transition",
            extra={
                "step": "stage_transition",
                "from": previous.value,
                "to": target.value,
                "generation": state.generation,
            },
        )

        if isinstance(state.flow, BookingFlow):
            self._spawn(state.flow.load)
        return True

    def _build_flow(self, stage: Stage, generation: int) -> SubFlow:
        ctx = FlowContext(
            gateway=self._gateway,
            settings=self._settings,
            generation=generation,
            is_live=partial(self._is_current, generation),
        )
        if stage == Stage.AUTH:
            return AuthFlow(ctx, on_success=partial(self._on_auth_success, generation))
        if stage == Stage.LIST_VEHICLE:
            ctx.on_error = self._on_error
            return ListingWizard(ctx, on_done=partial(self._on_listing_done, generation))
        if stage == Stage.BOOKING:
            return BookingFlow(ctx)
        if stage == Stage.SUPPORT:
            ctx.on_error = self._on_error
            return SupportChat(ctx)
        return None

    def _is_current(self, generation: int) -> bool:
        return self.state.generation == generation

    def _log_stale_report(self, report: str, generation: int) -> None:
        logger.info(
            "Ignoring report from a discarded sub-flow",
            extra={
                "step": "stale_response",
                "report": report,
                "generation": generation,
                "current_generation": self.state.generation,
            },
        )

    # ── Background work ───────────────────────────────────

    def _spawn(self, factory: Callable[[], Awaitable[Any]]) -> asyncio.Task[Any]:
        loop = asyncio.get_running_loop()
        task = loop.create_task(factory())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def join(self) -> None:
        """Wait for the splash timer and any catalog fetches to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def aclose(self) -> None:
        """Cancel outstanding background work (the session is being closed)."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
