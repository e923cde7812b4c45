"""
Per-instance context handed to every sub-flow by the session controller.

The generation tag and liveness probe are what make late responses safe:
a sub-flow checks ``is_live()`` after every await and, once its stage
has been left, drops the result instead of touching any state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from rentflow.config import Settings
from rentflow.exceptions import GatewayError
from rentflow.services.protocols import NetworkGateway


def _always_live() -> bool:
    return True


@dataclass
class FlowContext:
    gateway: NetworkGateway
    settings: Settings
    generation: int = 0
    is_live: Callable[[], bool] = field(default=_always_live)
    # Opt-in error surfacing for the flows that fail silently by default
    on_error: Optional[Callable[[GatewayError], None]] = None

    def report_error(self, exc: GatewayError) -> None:
        if self.on_error is not None:
            self.on_error(exc)
