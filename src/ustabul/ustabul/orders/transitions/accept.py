from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import NotificationType, OrderStatus
from ...users.model import SessionUser
from ..model import Order
from .base import AssignedMasterTransition, Notice, TransitionDecision


class AcceptTransition(AssignedMasterTransition):
    """Assigned master confirms a directly booked order."""

    action = "accept"
    allowed_from = frozenset({OrderStatus.PENDING})

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
            status=OrderStatus.ACCEPTED,
            changes={"accepted_at": now},
            notice=Notice(
                user_id=order.customer_user_id,
                type=NotificationType.ORDER_ACCEPTED,
                title="Sifariş qəbul edildi",
                message=f"{actor.full_name} sizin sifarişinizi qəbul etdi",
            ),
        )
