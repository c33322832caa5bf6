import pytest

from src.ustabul.ustabul.core.enums import Urgency
from src.ustabul.ustabul.core.exceptions import ValidationError
from src.ustabul.ustabul.payments.fees.standard_calculator import StandardFeeCalculator


def test_planned_order_has_no_urgency_fee():
    fees = StandardFeeCalculator().calculate(100, Urgency.PLANNED)

    assert fees.urgency_fee == 0
    assert fees.platform_fee == 10
    assert fees.total == 110


def test_urgent_order_adds_thirty_percent():
    fees = StandardFeeCalculator().calculate(80, Urgency.URGENT)

    assert fees.urgency_fee == 24
    assert fees.platform_fee == 8
    assert fees.total == 112


def test_today_surcharge_and_custom_commission():
    fees = StandardFeeCalculator(commission_rate=lambda: 0.05).calculate(40, Urgency.TODAY)

    assert fees.urgency_fee == 6
    assert fees.platform_fee == 2
    assert fees.to_dict() == {"subtotal": 40, "urgencyFee": 6, "platformFee": 2, "total": 48}


def test_commission_is_read_on_every_call():
    rate = {"value": 0.1}
    calc = StandardFeeCalculator(commission_rate=lambda: rate["value"])

    assert calc.calculate(50, Urgency.PLANNED).platform_fee == 5
    rate["value"] = 0.2
    assert calc.calculate(50, Urgency.PLANNED).platform_fee == 10


def test_negative_subtotal_rejected():
    with pytest.raises(ValidationError):
        StandardFeeCalculator().calculate(-1, Urgency.PLANNED)
