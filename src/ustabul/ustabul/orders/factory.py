from __future__ import annotations

from dataclasses import dataclass

from ..core.exceptions import ValidationError
from .transitions.accept import AcceptTransition
from .transitions.base import OrderTransition
from .transitions.cancel import CancelTransition, RejectTransition
from .transitions.complete import CompleteTransition
from .transitions.start import StartTransition

TRANSITIONS: dict[str, type[OrderTransition]] = {
    AcceptTransition.action: AcceptTransition,
    StartTransition.action: StartTransition,
    CompleteTransition.action: CompleteTransition,
    CancelTransition.action: CancelTransition,
    RejectTransition.action: RejectTransition,
}


@dataclass
class OrderTransitionFactory:
    """Factory Pattern: choose the lifecycle step for a requested action."""

    def for_action(self, action: str) -> OrderTransition:
        cls = TRANSITIONS.get((action or "").strip().lower())
        if not cls:
            raise ValidationError("Yanlış əməliyyat")
        return cls()
