from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Any, Optional

from ..catalog.repository import CatalogRepository
from ..common.datetime_utils import iso, now_local, parse_iso_date
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_float, optional_int
from ..core.constants import FLAT_URGENCY_FEES
from ..core.enums import NotificationType, OrderStatus, PaymentMethod, Urgency
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..masters.repository import MasterRepository
from ..notifications.service import NotificationService
from ..payments.fees.base import FeeCalculator
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .factory import OrderTransitionFactory
from .model import NewOrder, Order
from .repository import OrderRepository
from .transitions.base import is_assigned_master, is_owner

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("categoryId", "title", "description", "address", "scheduledDate", "scheduledTime")

TIMELINE = (
    (OrderStatus.PENDING, "Sifariş yaradıldı", "created_at"),
    (OrderStatus.ACCEPTED, "Usta qəbul etdi", "accepted_at"),
    (OrderStatus.IN_PROGRESS, "İş davam edir", "started_at"),
    (OrderStatus.COMPLETED, "Tamamlandı", "completed_at"),
)


def _parse_enum(enum_cls, value: Optional[str], default, label: str):
    if not value:
        return default
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        raise ValidationError(f"{label} yanlışdır")


def parse_status(value: Optional[str]) -> Optional[OrderStatus]:
    return _parse_enum(OrderStatus, value, None, "Status")


class OrderService:
    def __init__(
        self,
        orders: OrderRepository,
        catalog: CatalogRepository,
        masters: MasterRepository,
        users: UserRepository,
        notifications: NotificationService,
        *,
        fee_calculator: FeeCalculator,
        transitions: Optional[OrderTransitionFactory] = None,
    ):
        self._orders = orders
        self._catalog = catalog
        self._masters = masters
        self._users = users
        self._notifications = notifications
        self._fees = fee_calculator
        self._transitions = transitions or OrderTransitionFactory()

    def _new_order_number(self, now: datetime) -> str:
        while True:
            number = f"UB-{now:%y%m%d}-{secrets.token_hex(3).upper()}"
            if not self._orders.order_number_exists(number):
                return number

    def create(self, actor: SessionUser, payload: dict[str, Any], *, now: Optional[datetime] = None) -> Order:
        now = now or now_local()
        if any(not str(payload.get(name) or "").strip() for name in REQUIRED_FIELDS):
            raise ValidationError("Tələb olunan sahələr doldurulmayıb")

        category_id = optional_int(payload.get("categoryId"), "Kateqoriya")
        if not self._catalog.get_category(category_id):
            raise NotFoundError("Kateqoriya tapılmadı")

        subcategory = None
        subcategory_id = optional_int(payload.get("subcategoryId"), "Alt kateqoriya")
        if subcategory_id:
            subcategory = self._catalog.get_subcategory(subcategory_id)
            if not subcategory or subcategory.category_id != category_id:
                raise ValidationError("Alt kateqoriya yanlışdır")

        master_id = optional_int(payload.get("masterId"), "Usta")
        master = None
        if master_id:
            master = self._masters.get_by_id(master_id)
            if not master or not master.is_active:
                raise NotFoundError("Usta tapılmadı")
            if master.user_id == actor.user_id:
                raise ValidationError("Özünüzə sifariş verə bilməzsiniz")

        service_id = optional_int(payload.get("serviceId"), "Xidmət")
        estimated_price = None
        if service_id:
            service = self._masters.get_service(service_id)
            if not service or not service.is_active or (master_id and service.master_id != master_id):
                raise ValidationError("Xidmət yanlışdır")
            estimated_price = service.price
        elif subcategory and subcategory.base_price:
            estimated_price = subcategory.base_price

        urgency = _parse_enum(Urgency, payload.get("urgency"), Urgency.PLANNED, "Təcililik")
        payment_method = _parse_enum(PaymentMethod, payload.get("paymentMethod"), PaymentMethod.CASH, "Ödəniş üsulu")

        if estimated_price is not None:
            fees = self._fees.calculate(estimated_price, urgency)
            urgency_fee, platform_fee = fees.urgency_fee, fees.platform_fee
        else:
            urgency_fee, platform_fee = FLAT_URGENCY_FEES.get(urgency.value, 0.0), 0.0

        customer = self._users.ensure_customer_profile(actor.user_id)
        photos = payload.get("photos") or []
        if not isinstance(photos, list):
            raise ValidationError("Şəkillər siyahı olmalıdır")

        new = NewOrder(
            order_number=self._new_order_number(now),
            customer_id=customer.customer_id,
            category_id=category_id,
            title=str(payload["title"]).strip(),
            description=str(payload["description"]).strip(),
            address=str(payload["address"]).strip(),
            scheduled_date=parse_iso_date(str(payload["scheduledDate"])),
            scheduled_time=str(payload["scheduledTime"]).strip(),
            urgency=urgency,
            payment_method=payment_method,
            master_id=master_id,
            subcategory_id=subcategory_id,
            service_id=service_id,
            district=(payload.get("district") or "").strip() or None,
            lat=optional_float(payload.get("lat"), "Enlik"),
            lng=optional_float(payload.get("lng"), "Uzunluq"),
            estimated_price=estimated_price,
            urgency_fee=urgency_fee,
            platform_fee=platform_fee,
            photos=tuple(str(p) for p in photos),
        )
        order_id = self._orders.create(new)
        logger.info("Order %s (%s) created by user %s", order_id, new.order_number, actor.user_id)

        if master:
            self._notifications.notify(
                user_id=master.user_id,
                type=NotificationType.ORDER_NEW,
                title="Yeni sifariş",
                message=f"Sizə yeni sifariş gəldi: {new.title}",
                data={"orderId": order_id},
            )
        return self._orders.get(order_id)

    def list_for(
        self,
        actor: SessionUser,
        *,
        view: Optional[str],
        status: Optional[str],
        page: PageRequest,
    ) -> Page[Order]:
        status_filter = parse_status(status)
        as_master = (view or "").lower() == "master" or (not view and actor.customer_id is None)
        if as_master:
            if actor.master_id is None:
                raise AuthorizationError("Usta profiliniz yoxdur")
            return self._orders.list_for_master(actor.master_id, status=status_filter, page=page)
        if actor.customer_id is None:
            return Page(items=[], total=0, request=page)
        return self._orders.list_for_customer(actor.customer_id, status=status_filter, page=page)

    def list_open(self, actor: SessionUser, *, category_id=None, page: PageRequest) -> Page[Order]:
        if actor.master_id is None and not actor.is_admin:
            raise AuthorizationError("Yalnız ustalar açıq sifarişləri görə bilər")
        return self._orders.list_open(category_id=optional_int(category_id, "Kateqoriya"), page=page)

    def list_admin(self, *, status: Optional[str], search: Optional[str], page: PageRequest) -> Page[Order]:
        return self._orders.list_admin(status=parse_status(status), search=(search or "").strip() or None, page=page)

    def get_for(self, actor: SessionUser, order_id: int) -> Order:
        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Sifariş tapılmadı")
        if actor.is_admin or is_owner(order, actor) or is_assigned_master(order, actor):
            return order
        if actor.master_id is not None and order.is_open:
            return order
        raise AuthorizationError("Bu sifarişə baxmağa icazəniz yoxdur")

    def perform(
        self,
        actor: SessionUser,
        order_id: int,
        action: str,
        *,
        final_price=None,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        now = now or now_local()
        transition = self._transitions.for_action(action)

        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Sifariş tapılmadı")
        transition.ensure_allowed(order, actor)

        decision = transition.decide(
            order=order,
            actor=actor,
            now=now,
            final_price=optional_float(final_price, "Yekun qiymət"),
            reason=reason,
        )
        changes = dict(decision.changes)
        changes["status"] = decision.status
        applied = self._orders.apply_transition(
            order.order_id,
            expected_status=order.status,
            changes=changes,
            increment_master_jobs=decision.increment_master_jobs,
        )
        if not applied:
            raise ValidationError("Sifariş artıq dəyişdirilib, yenidən yoxlayın")

        logger.info("Order %s: %s -> %s by user %s", order.order_id, order.status.value, decision.status.value, actor.user_id)
        if decision.notice:
            self._notifications.notify(
                user_id=decision.notice.user_id,
                type=decision.notice.type,
                title=decision.notice.title,
                message=decision.notice.message,
                data={"orderId": order.order_id},
            )
        return self._orders.get(order.order_id)

    def track(self, actor: SessionUser, order_id: int) -> dict:
        order = self.get_for(actor, order_id)
        reached = [s for s, _, _ in TIMELINE]
        current_index = reached.index(order.status) if order.status in reached else -1

        timeline = []
        for index, (status, label, attr) in enumerate(TIMELINE):
            moment = getattr(order, attr)
            timeline.append(
                {
                    "status": status.value,
                    "label": label,
                    "date": iso(moment),
                    "completed": moment is not None or index <= current_index,
                    "current": index == current_index,
                }
            )
        return {
            "orderId": order.order_id,
            "orderNumber": order.order_number,
            "status": order.status.value,
            "cancelled": order.status == OrderStatus.CANCELLED,
            "cancelReason": order.cancel_reason,
            "cancelledAt": iso(order.cancelled_at),
            "masterName": order.master_name,
            "scheduledDate": iso(order.scheduled_date),
            "scheduledTime": order.scheduled_time,
            "timeline": timeline,
        }
