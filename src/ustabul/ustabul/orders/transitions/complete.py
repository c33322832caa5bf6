from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import NotificationType, OrderStatus
from ...core.exceptions import ValidationError
from ...users.model import SessionUser
from ..model import Order
from .base import AssignedMasterTransition, Notice, TransitionDecision


class CompleteTransition(AssignedMasterTransition):
    """Finishes the job; final price defaults to the estimate."""

    action = "complete"
    allowed_from = frozenset({OrderStatus.IN_PROGRESS})

    def decide(
        self,
        *,
        order: Order,
        actor: SessionUser,
        now: datetime,
        final_price: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TransitionDecision:
        if final_price is not None and final_price < 0:
            raise ValidationError("Yekun qiymət mənfi ola bilməz")
        price = final_price if final_price is not None else order.estimated_price

        return TransitionDecision(
            status=OrderStatus.COMPLETED,
            changes={"completed_at": now, "final_price": price},
            notice=Notice(
                user_id=order.customer_user_id,
                type=NotificationType.ORDER_COMPLETED,
                title="Sifariş tamamlandı",
                message="Sifarişiniz tamamlandı. Ustanı qiymətləndirməyi unutmayın!",
            ),
            increment_master_jobs=True,
        )
