from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_float, optional_int
from ..core.enums import ApplicationStatus, NotificationType, OrderStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..orders.model import Order
from ..orders.repository import OrderRepository
from ..orders.transitions.base import is_owner
from ..users.model import SessionUser
from .model import JobApplication
from .repository import ApplicationRepository

logger = logging.getLogger(__name__)


class ApplicationService:
    def __init__(
        self,
        applications: ApplicationRepository,
        orders: OrderRepository,
        notifications: NotificationService,
    ):
        self._applications = applications
        self._orders = orders
        self._notifications = notifications

    def _order(self, order_id: int) -> Order:
        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Sifariş tapılmadı")
        return order

    def _application(self, application_id: int) -> JobApplication:
        application = self._applications.get(application_id)
        if not application:
            raise NotFoundError("Müraciət tapılmadı")
        return application

    def apply(
        self,
        actor: SessionUser,
        *,
        order_id,
        price,
        message: Optional[str] = None,
        estimated_duration: Optional[str] = None,
    ) -> JobApplication:
        if actor.master_id is None:
            raise ValidationError("Usta profili tapılmadı")

        order_id = optional_int(order_id, "Sifariş")
        price = optional_float(price, "Qiymət")
        if not order_id or price is None:
            raise ValidationError("Sifariş və qiymət tələb olunur")
        if price <= 0:
            raise ValidationError("Qiymət müsbət olmalıdır")

        order = self._order(order_id)
        if order.customer_user_id == actor.user_id:
            raise ValidationError("Öz sifarişinizə müraciət edə bilməzsiniz")
        if not order.is_open:
            raise ValidationError("Bu sifariş artıq müraciət qəbul etmir")
        if self._applications.find(order_id=order_id, master_id=actor.master_id):
            raise ValidationError("Artıq müraciət etmisiniz")

        application_id = self._applications.create(
            order_id=order_id,
            master_id=actor.master_id,
            price=price,
            message=(message or "").strip() or None,
            estimated_duration=(estimated_duration or "").strip() or None,
        )
        logger.info("Master %s applied to order %s", actor.master_id, order_id)
        self._notifications.notify(
            user_id=order.customer_user_id,
            type=NotificationType.APPLICATION_NEW,
            title="Yeni müraciət",
            message=f"{actor.full_name} sifarişinizə {price:.2f} AZN təklif etdi",
            data={"orderId": order_id, "applicationId": application_id},
        )
        return self._applications.get(application_id)

    def list_for(self, actor: SessionUser, *, order_id=None, master_id=None) -> Sequence[JobApplication]:
        order_id = optional_int(order_id, "Sifariş")
        master_id = optional_int(master_id, "Usta")

        if order_id:
            return self.list_for_order(actor, order_id)
        if actor.is_admin:
            return self._applications.list(master_id=master_id)
        if actor.master_id is None:
            raise AuthorizationError("İcazə yoxdur")
        if master_id and master_id != actor.master_id:
            raise AuthorizationError("İcazə yoxdur")
        return self._applications.list(master_id=actor.master_id)

    def list_for_order(self, actor: SessionUser, order_id: int) -> Sequence[JobApplication]:
        order = self._order(order_id)
        if actor.is_admin or is_owner(order, actor):
            return self._applications.list(order_id=order_id)
        if actor.master_id is not None:
            # a master only sees their own offer on somebody else's order
            return self._applications.list(order_id=order_id, master_id=actor.master_id)
        raise AuthorizationError("İcazə yoxdur")

    def get_for(self, actor: SessionUser, application_id: int) -> JobApplication:
        application = self._application(application_id)
        if actor.is_admin or application.master_id == actor.master_id:
            return application
        if is_owner(self._order(application.order_id), actor):
            return application
        raise AuthorizationError("İcazə yoxdur")

    def decide(
        self,
        actor: SessionUser,
        application_id: int,
        action: str,
        *,
        rejected_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> JobApplication:
        now = now or now_local()
        action = (action or "").strip().lower()
        application = self._application(application_id)

        if action == "withdraw":
            return self._withdraw(actor, application, now=now)
        if action not in {"accept", "reject"}:
            raise ValidationError("Yanlış əməliyyat")

        order = self._order(application.order_id)
        if not is_owner(order, actor):
            raise AuthorizationError("Bu əməliyyatı yalnız sifariş sahibi edə bilər")
        if application.status != ApplicationStatus.PENDING:
            raise ValidationError("Müraciət artıq cavablandırılıb")

        if action == "accept":
            if order.status != OrderStatus.PENDING or order.master_id is not None:
                raise ValidationError("Sifariş artıq başqa ustaya verilib")
            if not self._applications.accept(application.application_id, now=now):
                raise ValidationError("Müraciəti qəbul etmək alınmadı")
            logger.info("Application %s accepted for order %s", application.application_id, order.order_id)
            self._notifications.notify(
                user_id=application.master_user_id,
                type=NotificationType.APPLICATION_ACCEPTED,
                title="Müraciətiniz qəbul edildi",
                message=f"\"{order.title}\" sifarişi üçün müraciətiniz qəbul edildi",
                data={"orderId": order.order_id, "applicationId": application.application_id},
            )
        else:
            reason = (rejected_reason or "").strip() or None
            if not self._applications.set_status(
                application.application_id,
                expected=ApplicationStatus.PENDING,
                status=ApplicationStatus.REJECTED,
                now=now,
                rejected_reason=reason,
            ):
                raise ValidationError("Müraciət artıq cavablandırılıb")
            self._notifications.notify(
                user_id=application.master_user_id,
                type=NotificationType.APPLICATION_REJECTED,
                title="Müraciətiniz rədd edildi",
                message=f"\"{order.title}\" sifarişi üçün müraciətiniz rədd edildi",
                data={"orderId": order.order_id, "applicationId": application.application_id},
            )
        return self._applications.get(application.application_id)

    def _withdraw(self, actor: SessionUser, application: JobApplication, *, now: datetime) -> JobApplication:
        if application.master_id != actor.master_id:
            raise AuthorizationError("Yalnız öz müraciətinizi geri çəkə bilərsiniz")
        if not self._applications.set_status(
            application.application_id,
            expected=ApplicationStatus.PENDING,
            status=ApplicationStatus.WITHDRAWN,
            now=now,
        ):
            raise ValidationError("Yalnız gözləyən müraciəti geri çəkmək olar")
        return self._applications.get(application.application_id)

    def delete(self, actor: SessionUser, application_id: int) -> None:
        application = self._application(application_id)
        if application.master_id != actor.master_id and not actor.is_admin:
            raise AuthorizationError("Yalnız öz müraciətinizi silə bilərsiniz")
        if application.status == ApplicationStatus.ACCEPTED:
            raise ValidationError("Qəbul edilmiş müraciət silinə bilməz")
        self._applications.delete(application_id)
