from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_int, require_non_empty
from ..core.enums import NotificationType, OrderStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..masters.repository import MasterRepository
from ..notifications.service import NotificationService
from ..orders.repository import OrderRepository
from ..orders.transitions.base import is_owner
from ..users.model import SessionUser
from .model import Review
from .repository import ReviewRepository

logger = logging.getLogger(__name__)

SORT_OPTIONS = frozenset({"newest", "highest", "lowest", "helpful"})


def parse_rating(value) -> int:
    """Whole stars 1-5; booleans and fractional values are refused."""
    if isinstance(value, bool):
        raise ValidationError("Reytinq 1-5 arasında olmalıdır")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError("Reytinq 1-5 arasında olmalıdır")
        value = int(value)
    try:
        rating = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise ValidationError("Reytinq 1-5 arasında olmalıdır")
    if rating < 1 or rating > 5:
        raise ValidationError("Reytinq 1-5 arasında olmalıdır")
    return rating


class ReviewService:
    def __init__(
        self,
        reviews: ReviewRepository,
        orders: OrderRepository,
        masters: MasterRepository,
        notifications: NotificationService,
    ):
        self._reviews = reviews
        self._orders = orders
        self._masters = masters
        self._notifications = notifications

    def list_for_master(
        self,
        *,
        master_id,
        min_rating=None,
        sort_by: Optional[str] = None,
        page: PageRequest,
    ) -> tuple[Page[Review], dict[int, int]]:
        master_id = optional_int(master_id, "Usta")
        if not master_id:
            raise ValidationError("Usta ID tələb olunur")
        min_rating = optional_int(min_rating, "Minimum reytinq")
        sort = (sort_by or "newest").lower()
        if sort not in SORT_OPTIONS:
            sort = "newest"

        result = self._reviews.list_for_master(master_id, min_rating=min_rating, sort=sort, page=page)
        return result, self._reviews.rating_breakdown(master_id)

    def create(
        self,
        actor: SessionUser,
        *,
        order_id,
        rating,
        comment: Optional[str] = None,
        photos: Sequence[str] = (),
    ) -> Review:
        order_id = optional_int(order_id, "Sifariş")
        if not order_id:
            raise ValidationError("Sifariş tələb olunur")
        rating = parse_rating(rating)

        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Sifariş tapılmadı")
        if not is_owner(order, actor):
            raise AuthorizationError("Yalnız sifariş sahibi rəy yaza bilər")
        if order.status != OrderStatus.COMPLETED:
            raise ValidationError("Yalnız tamamlanmış sifarişə rəy yazmaq olar")
        if self._reviews.get_by_order(order_id):
            raise ValidationError("Bu sifarişə artıq rəy yazılıb")
        if order.master_id is None:
            raise ValidationError("Sifarişə usta təyin edilməyib")

        review_id = self._reviews.create_and_rate(
            order_id=order_id,
            customer_id=order.customer_id,
            master_id=order.master_id,
            rating=rating,
            comment=(comment or "").strip() or None,
            photos=[str(p) for p in photos or ()],
        )
        logger.info("Review %s (%s stars) for master %s", review_id, rating, order.master_id)

        if order.master_user_id:
            self._notifications.notify(
                user_id=order.master_user_id,
                type=NotificationType.REVIEW_NEW,
                title="Yeni rəy",
                message=f"Sizə {rating} ulduzlu rəy yazıldı",
                data={"orderId": order_id, "reviewId": review_id},
            )
        return self._reviews.get(review_id)

    def reply(self, actor: SessionUser, review_id: int, text: str, *, now: Optional[datetime] = None) -> Review:
        text = require_non_empty(text, "Cavab")
        review = self._reviews.get(review_id)
        if not review:
            raise NotFoundError("Rəy tapılmadı")
        if review.master_id != actor.master_id:
            raise AuthorizationError("Yalnız öz rəylərinizə cavab verə bilərsiniz")
        if review.reply:
            raise ValidationError("Bu rəyə artıq cavab verilib")

        if not self._reviews.set_reply(review_id, reply=text, replied_at=now or now_local()):
            raise ValidationError("Bu rəyə artıq cavab verilib")
        return self._reviews.get(review_id)

    def recent_for_master(self, master_id: int, *, limit: int) -> Sequence[Review]:
        page = self._reviews.list_for_master(master_id, min_rating=None, sort="newest", page=PageRequest(1, limit))
        return page.items
