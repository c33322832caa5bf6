from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, or_, select

from ..database.schema import CategoryRow, MasterRow, MasterServiceRow, OrderRow, SubcategoryRow, master_categories
from ..extensions import db
from .model import Category, Subcategory
from .repository import CatalogRepository


def _to_subcategory(row: SubcategoryRow) -> Subcategory:
    return Subcategory(
        subcategory_id=int(row.id),
        category_id=int(row.category_id),
        name=row.name,
        slug=row.slug,
        description=row.description,
        base_price=row.base_price,
        order=int(row.order or 0),
        is_active=bool(row.is_active),
    )


def _to_category(row: CategoryRow, *, active_only: bool = True) -> Category:
    subs = [s for s in row.subcategories if s.is_active or not active_only]
    return Category(
        category_id=int(row.id),
        name=row.name,
        slug=row.slug,
        description=row.description,
        icon=row.icon,
        color=row.color,
        order=int(row.order or 0),
        is_active=bool(row.is_active),
        subcategories=tuple(_to_subcategory(s) for s in subs),
    )


class SQLAlchemyCatalogRepository(CatalogRepository):
    def list_categories(self, *, active_only: bool = True) -> Sequence[Category]:
        query = select(CategoryRow)
        if active_only:
            query = query.where(CategoryRow.is_active.is_(True))
        rows = db.session.execute(query.order_by(CategoryRow.order, CategoryRow.id)).scalars()
        return [_to_category(r, active_only=active_only) for r in rows]

    def get_category(self, category_id: int) -> Optional[Category]:
        row = db.session.get(CategoryRow, int(category_id))
        return _to_category(row) if row else None

    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        row = db.session.get(SubcategoryRow, int(subcategory_id))
        return _to_subcategory(row) if row else None

    def count_masters_by_category(self) -> dict[int, int]:
        rows = db.session.execute(
            select(master_categories.c.category_id, func.count(master_categories.c.master_id)).group_by(
                master_categories.c.category_id
            )
        )
        return {int(cid): int(n) for cid, n in rows}

    def count_orders_by_category(self) -> dict[int, int]:
        rows = db.session.execute(select(OrderRow.category_id, func.count(OrderRow.id)).group_by(OrderRow.category_id))
        return {int(cid): int(n) for cid, n in rows}

    def list_service_prices(self, category_id: int) -> Sequence[float]:
        linked = select(master_categories.c.master_id).where(master_categories.c.category_id == int(category_id))
        rows = db.session.execute(
            select(MasterServiceRow.price)
            .join(MasterRow, MasterRow.id == MasterServiceRow.master_id)
            .where(
                MasterServiceRow.is_active.is_(True),
                MasterRow.is_active.is_(True),
                MasterServiceRow.price > 0,
                or_(MasterServiceRow.category_id == int(category_id), MasterServiceRow.master_id.in_(linked)),
            )
        ).scalars()
        return [float(p) for p in rows]
