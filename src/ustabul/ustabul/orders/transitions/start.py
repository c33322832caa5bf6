from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import NotificationType, OrderStatus
from ...users.model import SessionUser
from ..model import Order
from .base import AssignedMasterTransition, Notice, TransitionDecision


class StartTransition(AssignedMasterTransition):
    action = "start"
    allowed_from = frozenset({OrderStatus.ACCEPTED})

    def decide(
        self,
        *,
        order: Order,
        actor: SessionUser,
        now: datetime,
        final_price: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TransitionDecision:
        return TransitionDecision(
            status=OrderStatus.IN_PROGRESS,
            changes={"started_at": now},
            notice=Notice(
                user_id=order.customer_user_id,
                type=NotificationType.ORDER_STARTED,
                title="İş başladı",
                message=f"{actor.full_name} sifariş üzərində işə başladı",
            ),
        )
