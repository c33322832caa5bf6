from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select

from ..common.pagination import Page, PageRequest
from ..database.base import transaction
from ..database.schema import MasterRow, ReviewRow
from ..extensions import db
from .model import Review
from .repository import ReviewRepository

SORTS = {
    "newest": (ReviewRow.created_at.desc(), ReviewRow.id.desc()),
    "highest": (ReviewRow.rating.desc(), ReviewRow.created_at.desc()),
    "lowest": (ReviewRow.rating.asc(), ReviewRow.created_at.desc()),
    "helpful": (ReviewRow.helpful_count.desc(), ReviewRow.created_at.desc()),
}


def _to_review(row: ReviewRow) -> Review:
    customer = row.customer
    return Review(
        review_id=int(row.id),
        order_id=int(row.order_id),
        customer_id=int(row.customer_id),
        master_id=int(row.master_id),
        rating=int(row.rating),
        created_at=row.created_at,
        comment=row.comment,
        photos=tuple(row.photos or ()),
        reply=row.reply,
        replied_at=row.replied_at,
        helpful_count=int(row.helpful_count or 0),
        is_approved=bool(row.is_approved),
        is_hidden=bool(row.is_hidden),
        customer_name=f"{customer.first_name} {customer.last_name}".strip() if customer else None,
        customer_avatar=customer.avatar if customer else None,
    )


def _visible(master_id: int):
    return (
        ReviewRow.master_id == int(master_id),
        ReviewRow.is_approved.is_(True),
        ReviewRow.is_hidden.is_(False),
    )


class SQLAlchemyReviewRepository(ReviewRepository):
    def get(self, review_id: int) -> Optional[Review]:
        row = db.session.get(ReviewRow, int(review_id))
        return _to_review(row) if row else None

    def get_by_order(self, order_id: int) -> Optional[Review]:
        row = db.session.execute(select(ReviewRow).where(ReviewRow.order_id == int(order_id))).scalar_one_or_none()
        return _to_review(row) if row else None

    def create_and_rate(
        self,
        *,
        order_id: int,
        customer_id: int,
        master_id: int,
        rating: int,
        comment: Optional[str],
        photos: Sequence[str],
    ) -> int:
        with transaction() as session:
            row = ReviewRow(
                order_id=int(order_id),
                customer_id=int(customer_id),
                master_id=int(master_id),
                rating=int(rating),
                comment=comment,
                photos=list(photos),
            )
            session.add(row)
            session.flush()

            avg, count = session.execute(
                select(func.avg(ReviewRow.rating), func.count(ReviewRow.id)).where(
                    ReviewRow.master_id == int(master_id), ReviewRow.is_approved.is_(True)
                )
            ).one()
            master = session.get(MasterRow, int(master_id))
            master.rating = round(float(avg or 0), 1)
            master.review_count = int(count or 0)
            return int(row.id)

    def list_for_master(
        self, master_id: int, *, min_rating: Optional[int], sort: str, page: PageRequest
    ) -> Page[Review]:
        query = select(ReviewRow).where(*_visible(master_id))
        if min_rating:
            query = query.where(ReviewRow.rating >= int(min_rating))

        total = db.session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
        rows = db.session.execute(
            query.order_by(*SORTS.get(sort, SORTS["newest"])).offset(page.offset).limit(page.limit)
        ).scalars()
        return Page(items=[_to_review(r) for r in rows], total=int(total), request=page)

    def rating_breakdown(self, master_id: int) -> dict[int, int]:
        rows = db.session.execute(
            select(ReviewRow.rating, func.count(ReviewRow.id)).where(*_visible(master_id)).group_by(ReviewRow.rating)
        )
        breakdown = {star: 0 for star in range(1, 6)}
        for rating, count in rows:
            breakdown[int(rating)] = int(count)
        return breakdown

    def set_reply(self, review_id: int, *, reply: str, replied_at: datetime) -> bool:
        with transaction() as session:
            row = session.get(ReviewRow, int(review_id))
            if not row or row.reply:
                return False
            row.reply = reply
            row.replied_at = replied_at
            return True
