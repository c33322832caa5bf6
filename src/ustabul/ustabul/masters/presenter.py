from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import iso
from ..reviews.model import Review
from ..users.model import User
from .model import AvailabilitySlot, MasterProfile, PortfolioItem, ServiceOffering


def service_json(s: ServiceOffering) -> dict:
    return {
        "id": s.service_id,
        "masterId": s.master_id,
        "name": s.name,
        "description": s.description,
        "price": s.price,
        "duration": s.duration,
        "categoryId": s.category_id,
        "isActive": s.is_active,
    }


def review_json(r: Review) -> dict:
    return {
        "id": r.review_id,
        "orderId": r.order_id,
        "masterId": r.master_id,
        "rating": r.rating,
        "comment": r.comment,
        "photos": list(r.photos),
        "reply": r.reply,
        "repliedAt": iso(r.replied_at),
        "helpfulCount": r.helpful_count,
        "customer": {"id": r.customer_id, "name": r.customer_name, "avatar": r.customer_avatar},
        "createdAt": iso(r.created_at),
    }


def master_json(
    m: MasterProfile,
    *,
    services: Optional[Sequence[ServiceOffering]] = None,
    reviews: Optional[Sequence[Review]] = None,
) -> dict:
    data = {
        "id": m.master_id,
        "userId": m.user_id,
        "firstName": m.first_name,
        "lastName": m.last_name,
        "fullName": m.full_name,
        "phone": m.phone,
        "bio": m.bio,
        "avatar": m.avatar,
        "district": m.district,
        "districts": list(m.districts),
        "experience": m.experience,
        "hourlyRate": m.hourly_rate,
        "rating": m.rating,
        "reviewCount": m.review_count,
        "completedJobs": m.completed_jobs,
        "isVerified": m.is_verified,
        "isPremium": m.is_premium,
        "isInsured": m.is_insured,
        "isActive": m.is_active,
        "workingHours": {"start": m.working_hours_start, "end": m.working_hours_end},
        "categories": [{"id": c.category_id, "name": c.name, "slug": c.slug} for c in m.categories],
        "createdAt": iso(m.created_at),
    }
    if services is not None:
        data["services"] = [service_json(s) for s in services]
    if reviews is not None:
        data["reviews"] = [review_json(r) for r in reviews]
    return data


def portfolio_json(p: PortfolioItem) -> dict:
    return {
        "id": p.item_id,
        "masterId": p.master_id,
        "title": p.title,
        "description": p.description,
        "url": p.url,
        "thumbnail": p.thumbnail,
        "type": p.type.value,
        "beforeImage": p.before_image,
        "afterImage": p.after_image,
        "images": list(p.images),
        "category": p.category,
        "duration": p.duration,
        "price": p.price,
        "createdAt": iso(p.created_at),
    }


def slot_json(s: AvailabilitySlot) -> dict:
    return {
        "id": s.slot_id,
        "masterId": s.master_id,
        "date": iso(s.date),
        "startTime": s.start_time,
        "endTime": s.end_time,
        "isAvailable": s.is_available,
    }


def admin_master_json(
    m: MasterProfile,
    user: Optional[User],
    *,
    services: Sequence[ServiceOffering],
    reviews: Sequence[Review],
) -> dict:
    data = master_json(m, services=services, reviews=reviews)
    data["user"] = (
        {"email": user.email, "isActive": user.is_active, "createdAt": iso(user.created_at)} if user else None
    )
    return data
