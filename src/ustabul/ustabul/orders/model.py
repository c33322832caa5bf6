from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import OrderStatus, PaymentMethod, PaymentStatus, Urgency

OPEN_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED, OrderStatus.IN_PROGRESS})


@dataclass(frozen=True)
class Order:
    order_id: int
    order_number: str
    customer_id: int
    customer_user_id: int
    category_id: int
    title: str
    description: str
    address: str
    scheduled_date: date
    scheduled_time: str
    status: OrderStatus
    urgency: Urgency
    created_at: datetime
    master_id: Optional[int] = None
    master_user_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    service_id: Optional[int] = None
    district: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    estimated_price: Optional[float] = None
    urgency_fee: float = 0.0
    platform_fee: float = 0.0
    final_price: Optional[float] = None
    total_price: Optional[float] = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    photos: tuple[str, ...] = ()
    cancel_reason: Optional[str] = None
    accepted_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    customer_name: Optional[str] = None
    master_name: Optional[str] = None
    category_name: Optional[str] = None

    @property
    def is_open(self) -> bool:
        """Visible to every master: waiting and nobody assigned yet."""
        return self.status == OrderStatus.PENDING and self.master_id is None

    @property
    def price(self) -> Optional[float]:
        return self.final_price if self.final_price is not None else self.estimated_price


@dataclass(frozen=True)
class NewOrder:
    order_number: str
    customer_id: int
    category_id: int
    title: str
    description: str
    address: str
    scheduled_date: date
    scheduled_time: str
    urgency: Urgency
    payment_method: PaymentMethod
    master_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    service_id: Optional[int] = None
    district: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    estimated_price: Optional[float] = None
    urgency_fee: float = 0.0
    platform_fee: float = 0.0
    photos: tuple[str, ...] = ()
