from __future__ import annotations

from ..common.datetime_utils import iso
from .model import Order


def order_json(o: Order) -> dict:
    return {
        "id": o.order_id,
        "orderNumber": o.order_number,
        "title": o.title,
        "description": o.description,
        "address": o.address,
        "district": o.district,
        "lat": o.lat,
        "lng": o.lng,
        "status": o.status.value,
        "urgency": o.urgency.value,
        "scheduledDate": iso(o.scheduled_date),
        "scheduledTime": o.scheduled_time,
        "categoryId": o.category_id,
        "categoryName": o.category_name,
        "subcategoryId": o.subcategory_id,
        "serviceId": o.service_id,
        "customerId": o.customer_id,
        "customerName": o.customer_name,
        "masterId": o.master_id,
        "masterName": o.master_name,
        "estimatedPrice": o.estimated_price,
        "urgencyFee": o.urgency_fee,
        "platformFee": o.platform_fee,
        "finalPrice": o.final_price,
        "totalPrice": o.total_price,
        "paymentMethod": o.payment_method.value,
        "paymentStatus": o.payment_status.value,
        "photos": list(o.photos),
        "cancelReason": o.cancel_reason,
        "createdAt": iso(o.created_at),
        "acceptedAt": iso(o.accepted_at),
        "startedAt": iso(o.started_at),
        "completedAt": iso(o.completed_at),
        "cancelledAt": iso(o.cancelled_at),
    }
