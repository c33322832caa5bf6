from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

import pytest

from src.ustabul.ustabul.applications.model import JobApplication
from src.ustabul.ustabul.applications.service import ApplicationService
from src.ustabul.ustabul.core.enums import ApplicationStatus, NotificationType, OrderStatus
from src.ustabul.ustabul.core.exceptions import AuthorizationError, ValidationError


class InMemoryApplications:
    def __init__(self, orders):
        self._orders = orders
        self.items: dict[int, JobApplication] = {}

    def get(self, application_id: int) -> Optional[JobApplication]:
        return self.items.get(application_id)

    def find(self, *, order_id: int, master_id: int) -> Optional[JobApplication]:
        return next((a for a in self.items.values() if a.order_id == order_id and a.master_id == master_id), None)

    def create(self, *, order_id, master_id, price, message=None, estimated_duration=None) -> int:
        application_id = len(self.items) + 1
        self.items[application_id] = JobApplication(
            application_id=application_id,
            order_id=order_id,
            master_id=master_id,
            master_user_id=master_id // 10,
            price=price,
            status=ApplicationStatus.PENDING,
            created_at=datetime(2025, 3, 10, 9, 0),
            message=message,
            estimated_duration=estimated_duration,
        )
        return application_id

    def list(self, *, order_id=None, master_id=None):
        return [
            a
            for a in self.items.values()
            if (order_id is None or a.order_id == order_id) and (master_id is None or a.master_id == master_id)
        ]

    def accept(self, application_id: int, *, now: datetime) -> bool:
        chosen = self.items[application_id]
        order = self._orders.orders[chosen.order_id]
        if order.status != OrderStatus.PENDING or order.master_id is not None:
            return False
        self._orders.orders[order.order_id] = dataclasses.replace(
            order,
            master_id=chosen.master_id,
            master_user_id=chosen.master_user_id,
            status=OrderStatus.ACCEPTED,
            accepted_at=now,
            final_price=chosen.price,
        )
        for key, app in self.items.items():
            if app.order_id != chosen.order_id or app.status != ApplicationStatus.PENDING:
                continue
            if key == application_id:
                self.items[key] = dataclasses.replace(app, status=ApplicationStatus.ACCEPTED, accepted_at=now)
            else:
                self.items[key] = dataclasses.replace(app, status=ApplicationStatus.REJECTED, rejected_at=now)
        return True

    def set_status(self, application_id, *, expected, status, now, rejected_reason=None) -> bool:
        app = self.items.get(application_id)
        if not app or app.status != expected:
            return False
        self.items[application_id] = dataclasses.replace(app, status=status, rejected_reason=rejected_reason)
        return True

    def delete(self, application_id: int) -> bool:
        return self.items.pop(application_id, None) is not None


@pytest.fixture
def setup(orders_store, make_order, notifier):
    orders = orders_store(make_order(master_id=None, master_user_id=None))
    applications = InMemoryApplications(orders)
    return ApplicationService(applications, orders, notifier), applications, orders


def test_master_applies_and_customer_is_notified(setup, master, notification_log):
    service, _, _ = setup

    application = service.apply(master, order_id=100, price="45", message=" Sabah gələ bilərəm ")

    assert application.status == ApplicationStatus.PENDING
    assert application.price == 45.0
    assert application.message == "Sabah gələ bilərəm"
    assert notification_log.types_for(1) == [NotificationType.APPLICATION_NEW]


def test_duplicate_application_rejected(setup, master):
    service, _, _ = setup
    service.apply(master, order_id=100, price=45)

    with pytest.raises(ValidationError):
        service.apply(master, order_id=100, price=50)


@pytest.mark.parametrize("price", [0, -10, None, ""])
def test_price_must_be_positive(setup, master, price):
    service, _, _ = setup

    with pytest.raises(ValidationError):
        service.apply(master, order_id=100, price=price)


def test_customer_without_master_profile_cannot_apply(setup, customer):
    service, _, _ = setup

    with pytest.raises(ValidationError):
        service.apply(customer, order_id=100, price=45)


def test_accept_assigns_master_and_rejects_siblings(setup, master, other_master, customer, fixed_now, notification_log):
    service, applications, orders = setup
    first = service.apply(master, order_id=100, price=45)
    second = service.apply(other_master, order_id=100, price=60)

    accepted = service.decide(customer, second.application_id, "accept", now=fixed_now)

    assert accepted.status == ApplicationStatus.ACCEPTED
    assert applications.get(first.application_id).status == ApplicationStatus.REJECTED
    order = orders.get(100)
    assert order.status == OrderStatus.ACCEPTED
    assert order.master_id == other_master.master_id
    assert order.final_price == 60
    assert NotificationType.APPLICATION_ACCEPTED in notification_log.types_for(other_master.user_id)


def test_cannot_apply_once_order_is_assigned(setup, master, other_master, customer):
    service, _, _ = setup
    chosen = service.apply(master, order_id=100, price=45)
    service.decide(customer, chosen.application_id, "accept")

    with pytest.raises(ValidationError):
        service.apply(other_master, order_id=100, price=30)


def test_only_owner_decides(setup, master, other_master):
    service, _, _ = setup
    application = service.apply(master, order_id=100, price=45)

    with pytest.raises(AuthorizationError):
        service.decide(other_master, application.application_id, "accept")


def test_reject_with_reason(setup, master, customer, notification_log):
    service, _, _ = setup
    application = service.apply(master, order_id=100, price=45)

    rejected = service.decide(customer, application.application_id, "reject", rejected_reason="Baha")

    assert rejected.status == ApplicationStatus.REJECTED
    assert rejected.rejected_reason == "Baha"
    assert NotificationType.APPLICATION_REJECTED in notification_log.types_for(master.user_id)


def test_withdraw_only_own_pending(setup, master, other_master):
    service, _, _ = setup
    application = service.apply(master, order_id=100, price=45)

    with pytest.raises(AuthorizationError):
        service.decide(other_master, application.application_id, "withdraw")

    withdrawn = service.decide(master, application.application_id, "withdraw")
    assert withdrawn.status == ApplicationStatus.WITHDRAWN

    with pytest.raises(ValidationError):
        service.decide(master, application.application_id, "withdraw")


def test_accepted_application_cannot_be_deleted(setup, master, customer):
    service, _, _ = setup
    application = service.apply(master, order_id=100, price=45)
    service.decide(customer, application.application_id, "accept")

    with pytest.raises(ValidationError):
        service.delete(master, application.application_id)
