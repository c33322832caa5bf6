import pytest

from src.ustabul.ustabul.core.exceptions import ValidationError
from src.ustabul.ustabul.orders.factory import OrderTransitionFactory
from src.ustabul.ustabul.orders.transitions.accept import AcceptTransition
from src.ustabul.ustabul.orders.transitions.cancel import CancelTransition, RejectTransition
from src.ustabul.ustabul.orders.transitions.complete import CompleteTransition
from src.ustabul.ustabul.orders.transitions.start import StartTransition


@pytest.mark.parametrize(
    "action, expected",
    [
        ("accept", AcceptTransition),
        ("start", StartTransition),
        ("complete", CompleteTransition),
        ("cancel", CancelTransition),
        (" Reject ", RejectTransition),
    ],
)
def test_factory_picks_transition_for_action(action, expected):
    assert isinstance(OrderTransitionFactory().for_action(action), expected)


@pytest.mark.parametrize("action", ["", None, "pay", "delete"])
def test_factory_rejects_unknown_action(action):
    with pytest.raises(ValidationError):
        OrderTransitionFactory().for_action(action)


def test_reject_uses_master_reason_when_none_given(make_order, master, fixed_now):
    order = make_order()

    decision = RejectTransition().decide(order=order, actor=master, now=fixed_now)

    assert decision.changes["cancel_reason"] == "Usta sifarişi qəbul etmədi"
    assert decision.notice.user_id == order.customer_user_id


def test_cancel_by_customer_notifies_master(make_order, customer, fixed_now):
    order = make_order()

    decision = CancelTransition().decide(order=order, actor=customer, now=fixed_now, reason="  Fikrimi dəyişdim ")

    assert decision.changes["cancel_reason"] == "Fikrimi dəyişdim"
    assert decision.notice.user_id == order.master_user_id


def test_cancel_open_order_without_master_has_no_notice(make_order, customer, fixed_now):
    order = make_order(master_id=None, master_user_id=None)

    decision = CancelTransition().decide(order=order, actor=customer, now=fixed_now)

    assert decision.notice is None
    assert decision.changes["cancel_reason"] == "İstifadəçi tərəfindən ləğv edildi"


def test_complete_defaults_final_price_to_estimate(make_order, master, fixed_now):
    decision = CompleteTransition().decide(order=make_order(), actor=master, now=fixed_now)

    assert decision.changes["final_price"] == 40.0
    assert decision.increment_master_jobs is True


def test_complete_rejects_negative_price(make_order, master, fixed_now):
    with pytest.raises(ValidationError):
        CompleteTransition().decide(order=make_order(), actor=master, now=fixed_now, final_price=-5)
