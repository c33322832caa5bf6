import pytest

from src.ustabul.ustabul.core.enums import PaymentStatus
from src.ustabul.ustabul.core.exceptions import ValidationError
from src.ustabul.ustabul.payments.service import map_webhook_status


@pytest.mark.parametrize(
    "value, expected",
    [
        ("success", PaymentStatus.PAID),
        ("Completed", PaymentStatus.PAID),
        ("pending", PaymentStatus.PENDING),
        ("failed", PaymentStatus.FAILED),
        (" refunded ", PaymentStatus.REFUNDED),
    ],
)
def test_known_webhook_statuses(value, expected):
    assert map_webhook_status(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "paid-ish"])
def test_missing_or_unknown_status_is_rejected(value):
    with pytest.raises(ValidationError):
        map_webhook_status(value)
