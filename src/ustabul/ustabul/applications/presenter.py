from __future__ import annotations

from ..common.datetime_utils import iso
from .model import JobApplication


def application_json(a: JobApplication) -> dict:
    return {
        "id": a.application_id,
        "orderId": a.order_id,
        "masterId": a.master_id,
        "master": {"id": a.master_id, "userId": a.master_user_id, "name": a.master_name, "rating": a.master_rating},
        "price": a.price,
        "message": a.message,
        "estimatedDuration": a.estimated_duration,
        "status": a.status.value,
        "rejectedReason": a.rejected_reason,
        "createdAt": iso(a.created_at),
        "acceptedAt": iso(a.accepted_at),
        "rejectedAt": iso(a.rejected_at),
    }
