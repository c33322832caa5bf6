from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.constants import DEFAULT_CANCEL_REASON
from ...core.enums import NotificationType, OrderStatus
from ...core.exceptions import AuthorizationError
from ...users.model import SessionUser
from ..model import OPEN_STATUSES, Order
from .base import Notice, OrderTransition, TransitionDecision, is_assigned_master, is_owner


class CancelTransition(OrderTransition):
    """Either side may cancel while the order is not finished."""

    action = "cancel"
    allowed_from = OPEN_STATUSES

    def check_actor(self, order: Order, actor: SessionUser) -> None:
        if not (is_owner(order, actor) or is_assigned_master(order, actor)):
            raise AuthorizationError("Bu sifarişi ləğv etməyə icazəniz yoxdur")

    def decide(
        self,
        *,
        order: Order,
        actor: SessionUser,
        now: datetime,
        final_price: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TransitionDecision:
        reason = (reason or "").strip() or DEFAULT_CANCEL_REASON
        if is_owner(order, actor):
            recipient = order.master_user_id
        else:
            recipient = order.customer_user_id

        notice = None
        if recipient:
            notice = Notice(
                user_id=recipient,
                type=NotificationType.ORDER_CANCELLED,
                title="Sifariş ləğv edildi",
                message=f"#{order.order_number} nömrəli sifariş ləğv edildi: {reason}",
            )
        return TransitionDecision(
            status=OrderStatus.CANCELLED,
            changes={"cancelled_at": now, "cancel_reason": reason},
            notice=notice,
        )


class RejectTransition(CancelTransition):
    """Same rules as cancel; a master declining gets its own default reason."""

    action = "reject"

    def decide(
        self,
        *,
        order: Order,
        actor: SessionUser,
        now: datetime,
        final_price: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TransitionDecision:
        if not (reason or "").strip() and is_assigned_master(order, actor):
            reason = "Usta sifarişi qəbul etmədi"
        return super().decide(order=order, actor=actor, now=now, reason=reason)
