from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import case, delete, func, or_, select

from ..common.pagination import Page, PageRequest
from ..core.enums import MasterBadge, OrderStatus, PortfolioType
from ..database.base import transaction
from ..database.schema import (
    CategoryRow,
    FavoriteRow,
    MasterAvailabilityRow,
    MasterRow,
    MasterServiceRow,
    OrderRow,
    PortfolioItemRow,
    UserRow,
    master_categories,
)
from ..extensions import db
from .model import AvailabilitySlot, CategoryRef, MasterProfile, NewPortfolioItem, PortfolioItem, ServiceOffering
from .repository import (
    AvailabilityRepository,
    FavoriteRepository,
    MasterActivityRepository,
    MasterRepository,
    PortfolioRepository,
)

EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "bio",
    "avatar",
    "district",
    "experience",
    "hourly_rate",
    "working_hours_start",
    "working_hours_end",
)

SORTS = {
    "rating": (MasterRow.rating.desc(), MasterRow.review_count.desc()),
    "price": (MasterRow.hourly_rate.is_(None), MasterRow.hourly_rate.asc()),
    "experience": (MasterRow.experience.desc(),),
    "reviews": (MasterRow.review_count.desc(),),
}

BADGE_COLUMNS = {
    MasterBadge.VERIFIED: "is_verified",
    MasterBadge.PREMIUM: "is_premium",
    MasterBadge.INSURED: "is_insured",
}


def to_master(row: MasterRow) -> MasterProfile:
    return MasterProfile(
        master_id=int(row.id),
        user_id=int(row.user_id),
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        bio=row.bio,
        avatar=row.avatar,
        district=row.district,
        districts=tuple(row.districts or ()),
        experience=int(row.experience or 0),
        hourly_rate=row.hourly_rate,
        rating=float(row.rating or 0),
        review_count=int(row.review_count or 0),
        completed_jobs=int(row.completed_jobs or 0),
        is_verified=bool(row.is_verified),
        is_premium=bool(row.is_premium),
        is_insured=bool(row.is_insured),
        is_active=bool(row.is_active),
        working_hours_start=row.working_hours_start,
        working_hours_end=row.working_hours_end,
        categories=tuple(CategoryRef(category_id=int(c.id), name=c.name, slug=c.slug) for c in row.categories),
        created_at=row.created_at,
    )


def to_service(row: MasterServiceRow) -> ServiceOffering:
    return ServiceOffering(
        service_id=int(row.id),
        master_id=int(row.master_id),
        name=row.name,
        price=float(row.price),
        category_id=row.category_id,
        description=row.description,
        duration=row.duration,
        is_active=bool(row.is_active),
    )


def _visible(query):
    return query.join(UserRow, UserRow.id == MasterRow.user_id).where(
        MasterRow.is_active.is_(True), UserRow.is_active.is_(True)
    )


class SQLAlchemyMasterRepository(MasterRepository):
    def get_by_id(self, master_id: int) -> Optional[MasterProfile]:
        row = db.session.get(MasterRow, int(master_id))
        return to_master(row) if row else None

    def get_by_user_id(self, user_id: int) -> Optional[MasterProfile]:
        row = db.session.execute(select(MasterRow).where(MasterRow.user_id == int(user_id))).scalar_one_or_none()
        return to_master(row) if row else None

    def search(
        self,
        *,
        category_slug: Optional[str],
        district: Optional[str],
        text: Optional[str],
        sort: str,
        page: PageRequest,
        include_inactive: bool = False,
    ) -> Page[MasterProfile]:
        query = select(MasterRow)
        if not include_inactive:
            query = _visible(query)
        if category_slug:
            query = (
                query.join(master_categories, master_categories.c.master_id == MasterRow.id)
                .join(CategoryRow, CategoryRow.id == master_categories.c.category_id)
                .where(CategoryRow.slug == category_slug)
            )
        if district:
            query = query.where(MasterRow.district == district)
        if text:
            like = f"%{text}%"
            query = query.where(
                or_(MasterRow.first_name.ilike(like), MasterRow.last_name.ilike(like), MasterRow.bio.ilike(like))
            )

        total = db.session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
        order = SORTS.get(sort, SORTS["rating"])
        rows = db.session.execute(
            query.order_by(*order, MasterRow.id.asc()).offset(page.offset).limit(page.limit)
        ).scalars()
        return Page(items=[to_master(r) for r in rows], total=int(total), request=page)

    def leaderboard(self, *, limit: int, category_id: Optional[int] = None) -> Sequence[MasterProfile]:
        query = _visible(select(MasterRow))
        if category_id:
            query = query.join(master_categories, master_categories.c.master_id == MasterRow.id).where(
                master_categories.c.category_id == int(category_id)
            )
        rows = db.session.execute(
            query.order_by(
                MasterRow.rating.desc(), MasterRow.completed_jobs.desc(), MasterRow.review_count.desc(), MasterRow.id
            ).limit(limit)
        ).scalars()
        return [to_master(r) for r in rows]

    def update_profile(self, master_id: int, **fields) -> MasterProfile:
        with transaction() as session:
            row = session.get(MasterRow, int(master_id))
            for name in EDITABLE_FIELDS:
                if name in fields:
                    setattr(row, name, fields[name])
            if "districts" in fields:
                row.districts = list(fields["districts"])
            if "category_ids" in fields:
                ids = [int(i) for i in fields["category_ids"]]
                row.categories = list(session.execute(select(CategoryRow).where(CategoryRow.id.in_(ids))).scalars())
            session.flush()
            return to_master(row)

    def set_badge(self, master_id: int, *, badge: MasterBadge, value: bool) -> bool:
        with transaction() as session:
            row = session.get(MasterRow, int(master_id))
            if not row:
                return False
            setattr(row, BADGE_COLUMNS[badge], bool(value))
            return True

    def set_active(self, master_id: int, *, is_active: bool) -> bool:
        with transaction() as session:
            row = session.get(MasterRow, int(master_id))
            if not row:
                return False
            row.is_active = bool(is_active)
            return True

    def list_services(self, master_id: int, *, active_only: bool = False) -> Sequence[ServiceOffering]:
        query = select(MasterServiceRow).where(MasterServiceRow.master_id == int(master_id))
        if active_only:
            query = query.where(MasterServiceRow.is_active.is_(True))
        rows = db.session.execute(query.order_by(MasterServiceRow.created_at.desc(), MasterServiceRow.id.desc()))
        return [to_service(r) for r in rows.scalars()]

    def get_service(self, service_id: int) -> Optional[ServiceOffering]:
        row = db.session.get(MasterServiceRow, int(service_id))
        return to_service(row) if row else None

    def create_service(
        self,
        *,
        master_id: int,
        name: str,
        price: float,
        category_id: Optional[int],
        description: Optional[str],
        duration: Optional[int],
    ) -> int:
        with transaction() as session:
            row = MasterServiceRow(
                master_id=int(master_id),
                name=name,
                price=float(price),
                category_id=category_id,
                description=description,
                duration=duration,
            )
            session.add(row)
            session.flush()
            return int(row.id)

    def update_service(self, service_id: int, **fields) -> ServiceOffering:
        with transaction() as session:
            row = session.get(MasterServiceRow, int(service_id))
            for name in ("name", "price", "category_id", "description", "duration", "is_active"):
                if name in fields:
                    setattr(row, name, fields[name])
            session.flush()
            return to_service(row)

    def delete_service(self, service_id: int) -> bool:
        with transaction() as session:
            row = session.get(MasterServiceRow, int(service_id))
            if not row:
                return False
            session.delete(row)
            return True


class SQLAlchemyFavoriteRepository(FavoriteRepository):
    def _find(self, customer_id: int, master_id: int) -> Optional[FavoriteRow]:
        return db.session.execute(
            select(FavoriteRow).where(FavoriteRow.customer_id == int(customer_id), FavoriteRow.master_id == int(master_id))
        ).scalar_one_or_none()

    def add(self, *, customer_id: int, master_id: int) -> int:
        with transaction() as session:
            row = FavoriteRow(customer_id=int(customer_id), master_id=int(master_id))
            session.add(row)
            session.flush()
            return int(row.id)

    def remove(self, *, customer_id: int, master_id: int) -> bool:
        with transaction() as session:
            row = self._find(customer_id, master_id)
            if not row:
                return False
            session.delete(row)
            return True

    def exists(self, *, customer_id: int, master_id: int) -> bool:
        return self._find(customer_id, master_id) is not None

    def list_masters(self, customer_id: int) -> Sequence[MasterProfile]:
        rows = db.session.execute(
            select(FavoriteRow).where(FavoriteRow.customer_id == int(customer_id)).order_by(FavoriteRow.created_at.desc())
        ).scalars()
        return [to_master(r.master) for r in rows]


def to_portfolio_item(row: PortfolioItemRow) -> PortfolioItem:
    return PortfolioItem(
        item_id=int(row.id),
        master_id=int(row.master_id),
        title=row.title,
        url=row.url,
        type=PortfolioType(row.type or PortfolioType.IMAGE.value),
        description=row.description,
        thumbnail=row.thumbnail,
        before_image=row.before_image,
        after_image=row.after_image,
        images=tuple(row.images or ()),
        category=row.category,
        duration=row.duration,
        price=row.price,
        created_at=row.created_at,
    )


def to_slot(row: MasterAvailabilityRow) -> AvailabilitySlot:
    return AvailabilitySlot(
        slot_id=int(row.id),
        master_id=int(row.master_id),
        date=row.date,
        start_time=row.start_time,
        end_time=row.end_time,
        is_available=bool(row.is_available),
    )


def _slot_row(master_id: int, slot: AvailabilitySlot) -> MasterAvailabilityRow:
    return MasterAvailabilityRow(
        master_id=int(master_id),
        date=slot.date,
        start_time=slot.start_time,
        end_time=slot.end_time,
        is_available=bool(slot.is_available),
    )


class SQLAlchemyPortfolioRepository(PortfolioRepository):
    def list_for_master(self, master_id: int) -> Sequence[PortfolioItem]:
        rows = db.session.execute(
            select(PortfolioItemRow)
            .where(PortfolioItemRow.master_id == int(master_id))
            .order_by(PortfolioItemRow.created_at.desc(), PortfolioItemRow.id.desc())
        ).scalars()
        return [to_portfolio_item(r) for r in rows]

    def create(self, master_id: int, item: NewPortfolioItem) -> PortfolioItem:
        with transaction() as session:
            row = PortfolioItemRow(
                master_id=int(master_id),
                title=item.title,
                url=item.url,
                type=item.type.value,
                description=item.description,
                thumbnail=item.thumbnail,
                before_image=item.before_image,
                after_image=item.after_image,
                images=list(item.images),
                category=item.category,
                duration=item.duration,
                price=item.price,
            )
            session.add(row)
            session.flush()
            return to_portfolio_item(row)


class SQLAlchemyAvailabilityRepository(AvailabilityRepository):
    def list_for_master(self, master_id: int) -> Sequence[AvailabilitySlot]:
        rows = db.session.execute(
            select(MasterAvailabilityRow)
            .where(MasterAvailabilityRow.master_id == int(master_id))
            .order_by(MasterAvailabilityRow.date.asc(), MasterAvailabilityRow.start_time.asc())
        ).scalars()
        return [to_slot(r) for r in rows]

    def add(self, master_id: int, slot: AvailabilitySlot) -> AvailabilitySlot:
        with transaction() as session:
            row = _slot_row(master_id, slot)
            session.add(row)
            session.flush()
            return to_slot(row)

    def replace_all(self, master_id: int, slots: Sequence[AvailabilitySlot]) -> Sequence[AvailabilitySlot]:
        with transaction() as session:
            session.execute(delete(MasterAvailabilityRow).where(MasterAvailabilityRow.master_id == int(master_id)))
            session.add_all([_slot_row(master_id, s) for s in slots])
        return self.list_for_master(master_id)


class SQLAlchemyMasterActivityRepository(MasterActivityRepository):
    def period_totals(self, master_id: int, *, start: datetime, end: datetime) -> tuple[int, float]:
        completed = OrderRow.status == OrderStatus.COMPLETED.value
        count, revenue = db.session.execute(
            select(
                func.count(OrderRow.id),
                func.sum(case((completed, func.coalesce(OrderRow.final_price, OrderRow.estimated_price, 0)), else_=0)),
            ).where(
                OrderRow.master_id == int(master_id),
                OrderRow.created_at >= start,
                OrderRow.created_at < end,
            )
        ).one()
        return int(count or 0), round(float(revenue or 0), 2)
