from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import case, func, or_, select, update

from ..common.pagination import Page, PageRequest
from ..core.enums import OrderStatus, PaymentMethod, PaymentStatus, Urgency
from ..database.base import transaction
from ..database.schema import CustomerRow, MasterRow, OrderRow
from ..extensions import db
from .model import NewOrder, Order
from .repository import OrderRepository

TRANSITION_FIELDS = frozenset(
    {
        "status",
        "master_id",
        "final_price",
        "cancel_reason",
        "accepted_at",
        "started_at",
        "completed_at",
        "cancelled_at",
    }
)


def to_order(row: OrderRow) -> Order:
    customer = row.customer
    master = row.master
    return Order(
        order_id=int(row.id),
        order_number=row.order_number,
        customer_id=int(row.customer_id),
        customer_user_id=int(customer.user_id),
        category_id=int(row.category_id),
        title=row.title,
        description=row.description,
        address=row.address,
        scheduled_date=row.scheduled_date,
        scheduled_time=row.scheduled_time,
        status=OrderStatus(row.status),
        urgency=Urgency(row.urgency),
        created_at=row.created_at,
        master_id=row.master_id,
        master_user_id=int(master.user_id) if master else None,
        subcategory_id=row.subcategory_id,
        service_id=row.service_id,
        district=row.district,
        lat=row.lat,
        lng=row.lng,
        estimated_price=row.estimated_price,
        urgency_fee=float(row.urgency_fee or 0),
        platform_fee=float(row.platform_fee or 0),
        final_price=row.final_price,
        total_price=row.total_price,
        payment_method=PaymentMethod(row.payment_method),
        payment_status=PaymentStatus(row.payment_status),
        transaction_id=row.transaction_id,
        photos=tuple(row.photos or ()),
        cancel_reason=row.cancel_reason,
        accepted_at=row.accepted_at,
        started_at=row.started_at,
        completed_at=row.completed_at,
        cancelled_at=row.cancelled_at,
        customer_name=f"{customer.first_name} {customer.last_name}".strip(),
        master_name=f"{master.first_name} {master.last_name}".strip() if master else None,
        category_name=row.category.name if row.category else None,
    )


def _page(query, page: PageRequest) -> Page[Order]:
    total = db.session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
    rows = db.session.execute(
        query.order_by(OrderRow.created_at.desc(), OrderRow.id.desc()).offset(page.offset).limit(page.limit)
    ).scalars()
    return Page(items=[to_order(r) for r in rows], total=int(total), request=page)


def _with_status(query, status: Optional[OrderStatus]):
    if status:
        query = query.where(OrderRow.status == status.value)
    return query


class SQLAlchemyOrderRepository(OrderRepository):
    def get(self, order_id: int) -> Optional[Order]:
        row = db.session.get(OrderRow, int(order_id))
        return to_order(row) if row else None

    def order_number_exists(self, order_number: str) -> bool:
        found = db.session.execute(select(OrderRow.id).where(OrderRow.order_number == order_number)).first()
        return found is not None

    def create(self, new: NewOrder) -> int:
        with transaction() as session:
            row = OrderRow(
                order_number=new.order_number,
                customer_id=new.customer_id,
                master_id=new.master_id,
                category_id=new.category_id,
                subcategory_id=new.subcategory_id,
                service_id=new.service_id,
                title=new.title,
                description=new.description,
                address=new.address,
                district=new.district,
                lat=new.lat,
                lng=new.lng,
                scheduled_date=new.scheduled_date,
                scheduled_time=new.scheduled_time,
                urgency=new.urgency.value,
                estimated_price=new.estimated_price,
                urgency_fee=new.urgency_fee,
                platform_fee=new.platform_fee,
                payment_method=new.payment_method.value,
                payment_status=PaymentStatus.PENDING.value,
                photos=list(new.photos),
                status=OrderStatus.PENDING.value,
            )
            session.add(row)
            session.flush()
            return int(row.id)

    def list_for_customer(self, customer_id: int, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        query = select(OrderRow).where(OrderRow.customer_id == int(customer_id))
        return _page(_with_status(query, status), page)

    def list_for_master(self, master_id: int, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        query = select(OrderRow).where(OrderRow.master_id == int(master_id))
        return _page(_with_status(query, status), page)

    def list_open(self, *, category_id: Optional[int], page: PageRequest) -> Page[Order]:
        query = select(OrderRow).where(OrderRow.status == OrderStatus.PENDING.value, OrderRow.master_id.is_(None))
        if category_id:
            query = query.where(OrderRow.category_id == int(category_id))
        return _page(query, page)

    def list_admin(self, *, status: Optional[OrderStatus], search: Optional[str], page: PageRequest) -> Page[Order]:
        query = _with_status(select(OrderRow), status)
        if search:
            like = f"%{search}%"
            query = query.join(CustomerRow, CustomerRow.id == OrderRow.customer_id).where(
                or_(
                    OrderRow.order_number.ilike(like),
                    OrderRow.title.ilike(like),
                    OrderRow.address.ilike(like),
                    CustomerRow.first_name.ilike(like),
                    CustomerRow.last_name.ilike(like),
                )
            )
        return _page(query, page)

    def apply_transition(
        self,
        order_id: int,
        *,
        expected_status: OrderStatus,
        changes: dict[str, Any],
        increment_master_jobs: bool = False,
    ) -> bool:
        values = {k: v.value if isinstance(v, OrderStatus) else v for k, v in changes.items() if k in TRANSITION_FIELDS}
        with transaction() as session:
            result = session.execute(
                update(OrderRow)
                .where(OrderRow.id == int(order_id), OrderRow.status == expected_status.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return False

            if increment_master_jobs:
                master_id = session.execute(select(OrderRow.master_id).where(OrderRow.id == int(order_id))).scalar_one()
                if master_id:
                    session.execute(
                        update(MasterRow)
                        .where(MasterRow.id == master_id)
                        .values(completed_jobs=MasterRow.completed_jobs + 1)
                        .execution_options(synchronize_session=False)
                    )
        return True

    def update_payment(
        self,
        order_id: int,
        *,
        payment_status: PaymentStatus,
        total_price: Optional[float] = None,
        payment_method: Optional[PaymentMethod] = None,
        transaction_id: Optional[str] = None,
    ) -> bool:
        with transaction() as session:
            row = session.get(OrderRow, int(order_id))
            if not row:
                return False
            row.payment_status = payment_status.value
            if total_price is not None:
                row.total_price = float(total_price)
            if payment_method is not None:
                row.payment_method = payment_method.value
            if transaction_id is not None:
                row.transaction_id = transaction_id
            return True

    def master_stats(self, master_id: int, *, month_start: datetime) -> dict:
        completed = OrderRow.status == OrderStatus.COMPLETED.value
        row = db.session.execute(
            select(
                func.count(OrderRow.id),
                func.sum(case((completed, 1), else_=0)),
                func.sum(case((OrderRow.status == OrderStatus.PENDING.value, 1), else_=0)),
                func.sum(
                    case(
                        (OrderRow.status.in_([OrderStatus.ACCEPTED.value, OrderStatus.IN_PROGRESS.value]), 1),
                        else_=0,
                    )
                ),
                func.sum(case((OrderRow.created_at >= month_start, 1), else_=0)),
                func.sum(case((completed, func.coalesce(OrderRow.final_price, OrderRow.estimated_price, 0)), else_=0)),
                func.sum(
                    case(
                        (
                            completed & (OrderRow.completed_at >= month_start),
                            func.coalesce(OrderRow.final_price, OrderRow.estimated_price, 0),
                        ),
                        else_=0,
                    )
                ),
            ).where(OrderRow.master_id == int(master_id))
        ).one()
        total, done, pending, active, this_month, revenue, month_revenue = row
        return {
            "totalOrders": int(total or 0),
            "completedOrders": int(done or 0),
            "pendingOrders": int(pending or 0),
            "activeOrders": int(active or 0),
            "thisMonthOrders": int(this_month or 0),
            "totalRevenue": round(float(revenue or 0), 2),
            "thisMonthRevenue": round(float(month_revenue or 0), 2),
        }
