from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import and_, case, func, select

from ..common.datetime_utils import iso
from ..core.enums import OrderStatus, PaymentStatus
from ..database.schema import CategoryRow, CustomerRow, MasterRow, OrderRow, UserRow
from ..extensions import db
from .repository import AdminRepository


def _count(query) -> int:
    return int(db.session.execute(query).scalar_one() or 0)


def _name(profile) -> str:
    return f"{profile.first_name} {profile.last_name}".strip() if profile else ""


def _paid_amount():
    return case(
        (
            OrderRow.payment_status == PaymentStatus.PAID.value,
            func.coalesce(OrderRow.final_price, OrderRow.total_price, 0),
        ),
        else_=0,
    )


def _in_window(column, start: datetime, end: datetime):
    return and_(column >= start, column < end)


class SQLAlchemyAdminRepository(AdminRepository):
    def platform_counts(self, *, month_start: datetime, previous_month_start: datetime) -> dict:
        orders = select(func.count(OrderRow.id))
        return {
            "totalCustomers": _count(select(func.count(CustomerRow.id))),
            "totalMasters": _count(select(func.count(MasterRow.id))),
            "totalOrders": _count(orders),
            "completedOrders": _count(orders.where(OrderRow.status == OrderStatus.COMPLETED.value)),
            "pendingOrders": _count(orders.where(OrderRow.status == OrderStatus.PENDING.value)),
            "thisMonthOrders": _count(orders.where(OrderRow.created_at >= month_start)),
            "lastMonthOrders": _count(
                orders.where(and_(OrderRow.created_at >= previous_month_start, OrderRow.created_at < month_start))
            ),
            "thisMonthUsers": _count(select(func.count(UserRow.id)).where(UserRow.created_at >= month_start)),
            "totalRevenue": float(
                db.session.execute(
                    select(func.coalesce(func.sum(OrderRow.final_price), 0)).where(
                        OrderRow.status == OrderStatus.COMPLETED.value
                    )
                ).scalar_one()
                or 0
            ),
        }

    def totals(self) -> dict:
        return {
            "users": _count(select(func.count(UserRow.id))),
            "masters": _count(select(func.count(MasterRow.id))),
            "orders": _count(select(func.count(OrderRow.id))),
        }

    def period_counts(self, *, start: datetime, end: datetime) -> dict:
        revenue = db.session.execute(
            select(func.coalesce(func.sum(_paid_amount()), 0)).where(_in_window(OrderRow.created_at, start, end))
        ).scalar_one()
        return {
            "users": _count(select(func.count(UserRow.id)).where(_in_window(UserRow.created_at, start, end))),
            "masters": _count(select(func.count(MasterRow.id)).where(_in_window(MasterRow.created_at, start, end))),
            "orders": _count(select(func.count(OrderRow.id)).where(_in_window(OrderRow.created_at, start, end))),
            "revenue": round(float(revenue or 0), 2),
        }

    def top_masters(self, limit: int) -> Sequence[dict]:
        revenue = func.coalesce(func.sum(_paid_amount()), 0)
        rows = db.session.execute(
            select(MasterRow, revenue)
            .outerjoin(OrderRow, OrderRow.master_id == MasterRow.id)
            .group_by(MasterRow.id)
            .order_by(MasterRow.completed_jobs.desc(), MasterRow.rating.desc(), MasterRow.id)
            .limit(limit)
        ).all()
        return [
            {
                "id": m.id,
                "name": _name(m),
                "orders": m.completed_jobs,
                "rating": m.rating,
                "revenue": round(float(paid or 0), 2),
            }
            for m, paid in rows
        ]

    def top_categories(self, limit: int, *, since: datetime, previous_since: datetime) -> Sequence[dict]:
        orders = func.count(OrderRow.id)
        recent = func.coalesce(func.sum(case((OrderRow.created_at >= since, 1), else_=0)), 0)
        previous = func.coalesce(
            func.sum(case((_in_window(OrderRow.created_at, previous_since, since), 1), else_=0)), 0
        )
        rows = db.session.execute(
            select(CategoryRow.id, CategoryRow.name, orders, func.coalesce(func.sum(_paid_amount()), 0), recent, previous)
            .outerjoin(OrderRow, OrderRow.category_id == CategoryRow.id)
            .where(CategoryRow.is_active.is_(True))
            .group_by(CategoryRow.id, CategoryRow.name)
            .order_by(orders.desc(), CategoryRow.id)
            .limit(limit)
        ).all()
        return [
            {
                "id": category_id,
                "name": name,
                "orders": int(count or 0),
                "revenue": round(float(paid or 0), 2),
                "recentOrders": int(current or 0),
                "previousOrders": int(before or 0),
            }
            for category_id, name, count, paid, current, before in rows
        ]

    def export_rows(self, kind: str) -> Sequence[dict]:
        if kind == "users":
            rows = db.session.execute(select(UserRow).order_by(UserRow.id)).scalars()
            return [
                {
                    "ID": u.id,
                    "Email": u.email,
                    "Telefon": u.phone,
                    "Rol": u.role,
                    "Aktiv": bool(u.is_active),
                    "Email təsdiqlənib": u.email_verified_at is not None,
                    "Ad": _name(u.customer or u.master),
                    "Qeydiyyat": iso(u.created_at),
                }
                for u in rows
            ]
        if kind == "masters":
            rows = db.session.execute(select(MasterRow).order_by(MasterRow.id)).scalars()
            return [
                {
                    "ID": m.id,
                    "Ad": _name(m),
                    "Telefon": m.phone,
                    "Rayon": m.district,
                    "Təcrübə": m.experience,
                    "Reytinq": m.rating,
                    "Rəy sayı": m.review_count,
                    "Tamamlanmış işlər": m.completed_jobs,
                    "Təsdiqlənib": bool(m.is_verified),
                    "Premium": bool(m.is_premium),
                    "Aktiv": bool(m.is_active),
                    "Kateqoriyalar": ", ".join(c.name for c in m.categories),
                }
                for m in rows
            ]
        rows = db.session.execute(select(OrderRow).order_by(OrderRow.created_at.desc(), OrderRow.id.desc())).scalars()
        return [
            {
                "ID": o.id,
                "Nömrə": o.order_number,
                "Başlıq": o.title,
                "Kateqoriya": o.category.name if o.category else None,
                "Müştəri": _name(o.customer),
                "Usta": _name(o.master),
                "Status": o.status,
                "Təcililik": o.urgency,
                "Təxmini qiymət": o.estimated_price,
                "Yekun qiymət": o.final_price,
                "Ödəniş üsulu": o.payment_method,
                "Ödəniş statusu": o.payment_status,
                "Tarix": iso(o.scheduled_date),
                "Yaradılıb": iso(o.created_at),
            }
            for o in rows
        ]
