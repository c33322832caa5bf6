from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import Urgency


@dataclass(frozen=True)
class FeeBreakdown:
    subtotal: float
    urgency_fee: float
    platform_fee: float
    total: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "urgencyFee": self.urgency_fee,
            "platformFee": self.platform_fee,
            "total": self.total,
        }


class FeeCalculator(ABC):
    """Calculator interface (Strategy Pattern for order fees)."""

    @abstractmethod
    def calculate(self, subtotal: float, urgency: Urgency) -> FeeBreakdown:
        raise NotImplementedError
