from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

from ..common.pagination import Page, PageRequest
from ..core.enums import OrderStatus, PaymentMethod, PaymentStatus
from .model import NewOrder, Order


class OrderRepository(Protocol):
    def get(self, order_id: int) -> Optional[Order]:
        raise NotImplementedError

    def order_number_exists(self, order_number: str) -> bool:
        raise NotImplementedError

    def create(self, new: NewOrder) -> int:
        raise NotImplementedError

    def list_for_customer(self, customer_id: int, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        raise NotImplementedError

    def list_for_master(self, master_id: int, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        raise NotImplementedError

    def list_open(self, *, category_id: Optional[int], page: PageRequest) -> Page[Order]:
        raise NotImplementedError

    def list_admin(self, *, status: Optional[OrderStatus], search: Optional[str], page: PageRequest) -> Page[Order]:
        raise NotImplementedError

    def apply_transition(
        self,
        order_id: int,
        *,
        expected_status: OrderStatus,
        changes: dict[str, Any],
        increment_master_jobs: bool = False,
    ) -> bool:
        """Apply `changes` only if the order still has `expected_status`."""
        raise NotImplementedError

    def update_payment(
        self,
        order_id: int,
        *,
        payment_status: PaymentStatus,
        total_price: Optional[float] = None,
        payment_method: Optional[PaymentMethod] = None,
        transaction_id: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def master_stats(self, master_id: int, *, month_start: datetime) -> dict:
        raise NotImplementedError
