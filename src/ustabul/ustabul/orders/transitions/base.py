from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ...core.enums import NotificationType, OrderStatus
from ...core.exceptions import AuthorizationError, ValidationError
from ...users.model import SessionUser
from ..model import Order


@dataclass(frozen=True)
class Notice:
    user_id: int
    type: NotificationType
    title: str
    message: str


@dataclass(frozen=True)
class TransitionDecision:
    status: OrderStatus
    changes: dict[str, Any] = field(default_factory=dict)
    notice: Optional[Notice] = None
    increment_master_jobs: bool = False


def is_assigned_master(order: Order, actor: SessionUser) -> bool:
    return actor.master_id is not None and order.master_id == actor.master_id


def is_owner(order: Order, actor: SessionUser) -> bool:
    return actor.customer_id is not None and order.customer_id == actor.customer_id


class OrderTransition(ABC):
    """Strategy Pattern: one lifecycle step of an order."""

    action: str = ""
    allowed_from: frozenset[OrderStatus] = frozenset()

    def ensure_allowed(self, order: Order, actor: SessionUser) -> None:
        self.check_actor(order, actor)
        if order.status not in self.allowed_from:
            raise ValidationError("Sifarişin hazırkı statusunda bu əməliyyat mümkün deyil")

    @abstractmethod
    def check_actor(self, order: Order, actor: SessionUser) -> None:
        raise NotImplementedError

    @abstractmethod
    def decide(
        self,
        *,
        order: Order,
        actor: SessionUser,
        now: datetime,
        final_price: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TransitionDecision:
        raise NotImplementedError


class AssignedMasterTransition(OrderTransition):
    def check_actor(self, order: Order, actor: SessionUser) -> None:
        if not is_assigned_master(order, actor):
            raise AuthorizationError("Bu əməliyyatı yalnız sifarişin ustası edə bilər")
