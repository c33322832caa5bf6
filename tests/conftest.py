from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Any, Optional

import pytest

from src.ustabul.ustabul.core.enums import NotificationType, OrderStatus, Role, Urgency
from src.ustabul.ustabul.notifications.model import Notification
from src.ustabul.ustabul.notifications.service import NotificationService
from src.ustabul.ustabul.orders.model import Order
from src.ustabul.ustabul.users.model import SessionUser


class InMemoryNotifications:
    def __init__(self):
        self.items: list[Notification] = []

    def create(self, *, user_id: int, type: NotificationType, title: str, message: str, data=None) -> int:
        item = Notification(
            notification_id=len(self.items) + 1,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            data=data or {},
            is_read=False,
            created_at=datetime(2025, 3, 10, 9, 0),
        )
        self.items.append(item)
        return item.notification_id

    def get(self, notification_id: int) -> Optional[Notification]:
        return next((n for n in self.items if n.notification_id == notification_id), None)

    def list_for_user(self, user_id: int, *, limit: int):
        return [n for n in self.items if n.user_id == user_id][:limit]

    def count_unread(self, user_id: int) -> int:
        return sum(1 for n in self.items if n.user_id == user_id and not n.is_read)

    def types_for(self, user_id: int) -> list[NotificationType]:
        return [n.type for n in self.items if n.user_id == user_id]


class InMemoryOrders:
    def __init__(self, *orders: Order):
        self.orders: dict[int, Order] = {o.order_id: o for o in orders}
        self.completed_jobs: dict[int, int] = {}

    def get(self, order_id: int) -> Optional[Order]:
        return self.orders.get(int(order_id))

    def order_number_exists(self, order_number: str) -> bool:
        return any(o.order_number == order_number for o in self.orders.values())

    def create(self, new) -> int:
        order_id = max(self.orders, default=0) + 1
        fields = dataclasses.asdict(new)
        fields["photos"] = tuple(new.photos)
        self.orders[order_id] = Order(
            order_id=order_id,
            customer_user_id=1,
            status=OrderStatus.PENDING,
            created_at=datetime(2025, 3, 10, 9, 0),
            **fields,
        )
        return order_id

    def apply_transition(self, order_id: int, *, expected_status, changes: dict[str, Any], increment_master_jobs=False):
        order = self.orders.get(order_id)
        if not order or order.status != expected_status:
            return False
        self.orders[order_id] = dataclasses.replace(order, **changes)
        if increment_master_jobs and order.master_id:
            self.completed_jobs[order.master_id] = self.completed_jobs.get(order.master_id, 0) + 1
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 10, 30)


@pytest.fixture
def notification_log() -> InMemoryNotifications:
    return InMemoryNotifications()


@pytest.fixture
def notifier(notification_log) -> NotificationService:
    return NotificationService(notification_log)


@pytest.fixture
def customer() -> SessionUser:
    return SessionUser(
        user_id=1, email="musteri@demo.az", full_name="Aysel Məmmədova", role=Role.CUSTOMER,
        email_verified=True, customer_id=10,
    )


@pytest.fixture
def master() -> SessionUser:
    return SessionUser(
        user_id=2, email="usta@demo.az", full_name="Elvin Həsənov", role=Role.MASTER,
        email_verified=True, master_id=20,
    )


@pytest.fixture
def other_master() -> SessionUser:
    return SessionUser(
        user_id=3, email="usta2@demo.az", full_name="Rəşad Quliyev", role=Role.MASTER,
        email_verified=True, master_id=30,
    )


@pytest.fixture
def make_order():
    def _make(**overrides) -> Order:
        values = dict(
            order_id=100,
            order_number="UB-250310-ABC123",
            customer_id=10,
            customer_user_id=1,
            category_id=1,
            title="Kran axır",
            description="Mətbəxdə kran axır",
            address="Nərimanov r., Bakı",
            scheduled_date=date(2025, 3, 12),
            scheduled_time="10:00",
            status=OrderStatus.PENDING,
            urgency=Urgency.PLANNED,
            created_at=datetime(2025, 3, 10, 9, 0),
            master_id=20,
            master_user_id=2,
            estimated_price=40.0,
        )
        values.update(overrides)
        return Order(**values)

    return _make


@pytest.fixture
def orders_store():
    return InMemoryOrders


@pytest.fixture
def app(monkeypatch, tmp_path):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.ustabul.ustabul.main import create_app

    app = create_app(
        {
            "UPLOAD_ROOT": str(tmp_path / "uploads"),
            "AUTO_SEED_DB": True,
        }
    )
    yield app

    from src.ustabul.ustabul.extensions import db

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
