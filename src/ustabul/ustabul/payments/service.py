from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import optional_float, optional_int
from ..core.enums import NotificationType, OrderStatus, PaymentMethod, PaymentStatus
from ..core.exceptions import AuthenticationError, AuthorizationError, IntegrationError, NotFoundError, ValidationError
from ..integrations.kapital_bank import KapitalBankGateway
from ..notifications.service import NotificationService
from ..orders.model import Order
from ..orders.repository import OrderRepository
from ..orders.transitions.base import is_assigned_master, is_owner
from ..users.model import SessionUser

logger = logging.getLogger(__name__)

WEBHOOK_STATUSES = {
    "success": PaymentStatus.PAID,
    "completed": PaymentStatus.PAID,
    "pending": PaymentStatus.PENDING,
    "failed": PaymentStatus.FAILED,
    "refunded": PaymentStatus.REFUNDED,
}

SETTLED = frozenset({PaymentStatus.PAID, PaymentStatus.REFUNDED})


def map_webhook_status(value: Optional[str]) -> PaymentStatus:
    key = str(value or "").strip().lower()
    if not key:
        raise ValidationError("Ödəniş statusu tələb olunur")
    try:
        return WEBHOOK_STATUSES[key]
    except KeyError:
        raise ValidationError(f"Naməlum ödəniş statusu: {value}")


def payment_json(order: Order) -> dict:
    return {
        "orderId": order.order_id,
        "orderNumber": order.order_number,
        "paymentMethod": order.payment_method.value,
        "paymentStatus": order.payment_status.value,
        "transactionId": order.transaction_id,
        "estimatedPrice": order.estimated_price,
        "finalPrice": order.final_price,
        "urgencyFee": order.urgency_fee,
        "platformFee": order.platform_fee,
        "totalPrice": order.total_price,
    }


class PaymentService:
    def __init__(
        self,
        orders: OrderRepository,
        gateway: KapitalBankGateway,
        notifications: NotificationService,
    ):
        self._orders = orders
        self._gateway = gateway
        self._notifications = notifications

    def _order(self, order_id) -> Order:
        order_id = optional_int(order_id, "Sifariş")
        if not order_id:
            raise ValidationError("Sifariş ID tələb olunur")
        order = self._orders.get(order_id)
        if not order:
            raise NotFoundError("Sifariş tapılmadı")
        return order

    def initialize(self, actor: SessionUser, *, order_id, amount=None, method: Optional[str] = None) -> dict:
        order = self._order(order_id)
        if not is_owner(order, actor):
            raise AuthorizationError("Yalnız sifariş sahibi ödəniş edə bilər")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Ləğv edilmiş sifariş üçün ödəniş mümkün deyil")
        if order.payment_status == PaymentStatus.PAID:
            raise ValidationError("Sifariş artıq ödənilib")

        try:
            payment_method = PaymentMethod((method or PaymentMethod.CASH.value).upper())
        except ValueError:
            raise ValidationError("Ödəniş üsulu yanlışdır")

        subtotal = optional_float(amount, "Məbləğ") or order.final_price or order.estimated_price
        if not subtotal or subtotal <= 0:
            raise ValidationError("Ödəniş məbləği müəyyən edilməyib")
        total = round(subtotal + (order.urgency_fee or 0), 2)

        if payment_method == PaymentMethod.CASH:
            self._orders.update_payment(
                order.order_id,
                payment_status=PaymentStatus.PENDING,
                total_price=total,
                payment_method=payment_method,
            )
            logger.info("Cash payment recorded for order %s total=%.2f", order.order_id, total)
            return {
                "orderId": order.order_id,
                "method": payment_method.value,
                "totalPrice": total,
                "message": "Ödəniş nağd olaraq qeydə alındı",
            }

        session = self._gateway.initialize_payment(
            order_id=order.order_id,
            amount=total,
            description=f"UstaBul sifariş #{order.order_number}",
            customer_email=actor.email,
        )
        self._orders.update_payment(
            order.order_id,
            payment_status=PaymentStatus.PENDING,
            total_price=total,
            payment_method=payment_method,
            transaction_id=session.transaction_id,
        )
        return {
            "orderId": order.order_id,
            "method": payment_method.value,
            "totalPrice": total,
            "transactionId": session.transaction_id,
            "redirectUrl": session.redirect_url,
            "demo": session.demo,
        }

    def status(self, actor: SessionUser, order_id) -> dict:
        order = self._order(order_id)
        if not (actor.is_admin or is_owner(order, actor) or is_assigned_master(order, actor)):
            raise AuthorizationError("Bu ödənişə baxmağa icazəniz yoxdur")

        result = payment_json(order)
        if order.transaction_id and order.payment_status == PaymentStatus.PENDING:
            result["gatewayStatus"] = self._gateway.check_status(order.transaction_id).status
        return result

    def handle_webhook(self, *, raw_body: bytes, signature: Optional[str], payload: dict) -> PaymentStatus:
        if not self._gateway.verify_signature(raw_body, signature):
            logger.warning("Rejected payment webhook with a bad signature")
            raise AuthenticationError("İmza yanlışdır")

        status = map_webhook_status(payload.get("status"))
        order = self._order(payload.get("orderId"))
        if status == PaymentStatus.PENDING and order.payment_status in SETTLED:
            raise ValidationError("Ödəniş artıq tamamlanıb")
        self._orders.update_payment(
            order.order_id,
            payment_status=status,
            transaction_id=payload.get("transactionId") or order.transaction_id,
        )
        logger.info("Webhook: order %s payment %s", order.order_id, status.value)

        if status == PaymentStatus.PAID and order.master_user_id:
            amount = order.total_price or order.final_price or order.estimated_price or 0
            self._notifications.notify(
                user_id=order.master_user_id,
                type=NotificationType.PAYMENT_RECEIVED,
                title="Ödəniş alındı",
                message=f"#{order.order_number} sifarişi üçün {amount:.2f} AZN ödənildi",
                data={"orderId": order.order_id},
            )
        return status

    def refund(self, order_id, *, amount=None) -> dict:
        order = self._order(order_id)
        if order.payment_status != PaymentStatus.PAID:
            raise ValidationError("Yalnız ödənilmiş sifariş geri qaytarıla bilər")

        if order.payment_method == PaymentMethod.CARD:
            if not order.transaction_id:
                raise ValidationError("Əməliyyat ID tapılmadı")
            if not self._gateway.refund(transaction_id=order.transaction_id, amount=optional_float(amount, "Məbləğ")):
                raise IntegrationError("Geri qaytarma alınmadı")

        self._orders.update_payment(order.order_id, payment_status=PaymentStatus.REFUNDED)
        logger.info("Order %s refunded", order.order_id)
        return payment_json(self._orders.get(order.order_id))
