from __future__ import annotations

from typing import Callable

from ...core.constants import DEFAULT_COMMISSION_PERCENT
from ...core.enums import Urgency
from ...core.exceptions import ValidationError
from .base import FeeBreakdown, FeeCalculator

URGENCY_RATES = {
    Urgency.PLANNED: 0.0,
    Urgency.TODAY: 0.15,
    Urgency.URGENT: 0.30,
}


class StandardFeeCalculator(FeeCalculator):
    """Standard rule: subtotal + urgency surcharge + platform commission.

    The commission is read on every call so admin changes apply immediately.
    """

    def __init__(self, commission_rate: Callable[[], float] = lambda: DEFAULT_COMMISSION_PERCENT / 100.0):
        self._commission_rate = commission_rate

    def calculate(self, subtotal: float, urgency: Urgency) -> FeeBreakdown:
        subtotal = float(subtotal)
        if subtotal < 0:
            raise ValidationError("Məbləğ mənfi ola bilməz")

        urgency_fee = round(subtotal * URGENCY_RATES.get(Urgency(urgency), 0.0), 2)
        platform_fee = round(subtotal * float(self._commission_rate()), 2)
        return FeeBreakdown(
            subtotal=round(subtotal, 2),
            urgency_fee=urgency_fee,
            platform_fee=platform_fee,
            total=round(subtotal + urgency_fee + platform_fee, 2),
        )
