from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, or_, select

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from ..database.base import transaction
from ..database.schema import CategoryRow, CustomerRow, LoginHistoryRow, MasterRow, OrderRow, UserRow
from ..extensions import db
from .model import CustomerProfile, LoginEvent, User
from .repository import UserRepository

PROFILE_FIELDS = ("first_name", "last_name", "phone", "avatar", "address", "district")


def _to_user(row: UserRow) -> User:
    return User(
        user_id=int(row.id),
        email=row.email,
        phone=row.phone,
        password_hash=row.password_hash,
        role=Role(row.role),
        is_active=bool(row.is_active),
        email_verified_at=row.email_verified_at,
        otp_code=row.otp_code,
        otp_expires_at=row.otp_expires_at,
        created_at=row.created_at,
    )


def _to_customer(row: CustomerRow) -> CustomerProfile:
    return CustomerProfile(
        customer_id=int(row.id),
        user_id=int(row.user_id),
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        avatar=row.avatar,
        address=row.address,
        district=row.district,
    )


def _display_name(row: UserRow) -> str:
    profile = row.master or row.customer
    if profile:
        return f"{profile.first_name} {profile.last_name}".strip()
    return row.email


class SQLAlchemyUserRepository(UserRepository):
    def _row(self, user_id: int) -> Optional[UserRow]:
        return db.session.get(UserRow, int(user_id))

    def get_by_id(self, user_id: int) -> Optional[User]:
        row = self._row(user_id)
        return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = db.session.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
        return _to_user(row) if row else None

    def get_by_phone(self, phone: str) -> Optional[User]:
        row = db.session.execute(select(UserRow).where(UserRow.phone == phone)).scalar_one_or_none()
        return _to_user(row) if row else None

    def create_user(
        self,
        *,
        email: str,
        phone: Optional[str],
        password_hash: str,
        role: Role,
        first_name: str,
        last_name: str,
    ) -> int:
        with transaction() as session:
            user = UserRow(email=email, phone=phone, password_hash=password_hash, role=role.value)
            if role == Role.MASTER:
                user.master = MasterRow(first_name=first_name, last_name=last_name, phone=phone, districts=[])
            else:
                user.customer = CustomerRow(first_name=first_name, last_name=last_name, phone=phone)
            session.add(user)
            session.flush()
            return int(user.id)

    def set_otp(self, user_id: int, *, code: Optional[str], expires_at: Optional[datetime]) -> bool:
        with transaction():
            row = self._row(user_id)
            if not row:
                return False
            row.otp_code = code
            row.otp_expires_at = expires_at
            return True

    def mark_email_verified(self, user_id: int, *, verified_at: datetime) -> bool:
        with transaction():
            row = self._row(user_id)
            if not row:
                return False
            row.email_verified_at = verified_at
            row.otp_code = None
            row.otp_expires_at = None
            return True

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with transaction():
            row = self._row(user_id)
            if not row:
                return False
            row.is_active = bool(is_active)
            return True

    def delete_by_id(self, user_id: int) -> bool:
        with transaction() as session:
            row = self._row(user_id)
            if not row:
                return False
            session.delete(row)
            return True

    def has_orders(self, user_id: int) -> bool:
        row = self._row(user_id)
        if not row:
            return False
        conditions = []
        if row.customer:
            conditions.append(OrderRow.customer_id == row.customer.id)
        if row.master:
            conditions.append(OrderRow.master_id == row.master.id)
        if not conditions:
            return False
        count = db.session.execute(select(func.count(OrderRow.id)).where(or_(*conditions))).scalar_one()
        return count > 0

    def get_customer_profile(self, user_id: int) -> Optional[CustomerProfile]:
        row = db.session.execute(select(CustomerRow).where(CustomerRow.user_id == int(user_id))).scalar_one_or_none()
        return _to_customer(row) if row else None

    def get_customer_by_id(self, customer_id: int) -> Optional[CustomerProfile]:
        row = db.session.get(CustomerRow, int(customer_id))
        return _to_customer(row) if row else None

    def ensure_customer_profile(self, user_id: int) -> CustomerProfile:
        existing = self.get_customer_profile(user_id)
        if existing:
            return existing

        with transaction() as session:
            user = self._row(user_id)
            if user.master:
                first_name, last_name = user.master.first_name, user.master.last_name
            else:
                first_name, last_name = user.email.split("@")[0], ""
            row = CustomerRow(user_id=user.id, first_name=first_name, last_name=last_name, phone=user.phone)
            session.add(row)
            session.flush()
            return _to_customer(row)

    def update_customer_profile(self, user_id: int, **fields) -> CustomerProfile:
        self.ensure_customer_profile(user_id)
        with transaction():
            row = db.session.execute(select(CustomerRow).where(CustomerRow.user_id == int(user_id))).scalar_one()
            for name in PROFILE_FIELDS:
                if name in fields:
                    setattr(row, name, fields[name])
            if "phone" in fields:
                row.user.phone = fields["phone"]
            return _to_customer(row)

    def promote_to_master(
        self,
        user_id: int,
        *,
        first_name: str,
        last_name: str,
        phone: Optional[str],
        bio: Optional[str],
        experience: int,
        category_slugs: Sequence[str],
        districts: Sequence[str],
    ) -> int:
        with transaction() as session:
            user = self._row(user_id)
            categories = []
            if category_slugs:
                categories = list(
                    session.execute(select(CategoryRow).where(CategoryRow.slug.in_(list(category_slugs)))).scalars()
                )
            master = MasterRow(
                first_name=first_name,
                last_name=last_name,
                phone=phone,
                bio=bio,
                experience=int(experience),
                districts=list(districts),
                district=districts[0] if districts else None,
                categories=categories,
            )
            user.master = master
            if user.role != Role.ADMIN.value:
                user.role = Role.MASTER.value
            session.flush()
            return int(master.id)

    def add_login_event(self, user_id: int, *, ip_address: str, user_agent: str, device: str) -> int:
        with transaction() as session:
            row = LoginHistoryRow(
                user_id=int(user_id), ip_address=ip_address, user_agent=(user_agent or "")[:255], device=device
            )
            session.add(row)
            session.flush()
            return int(row.id)

    def list_login_events(self, user_id: int, *, limit: int) -> Sequence[LoginEvent]:
        rows = db.session.execute(
            select(LoginHistoryRow)
            .where(LoginHistoryRow.user_id == int(user_id))
            .order_by(LoginHistoryRow.created_at.desc(), LoginHistoryRow.id.desc())
            .limit(limit)
        ).scalars()
        return [
            LoginEvent(
                event_id=int(r.id),
                user_id=int(r.user_id),
                ip_address=r.ip_address,
                user_agent=r.user_agent,
                device=r.device,
                created_at=r.created_at,
            )
            for r in rows
        ]

    def list_admin_view(self, *, search: Optional[str], role: Optional[Role], page: PageRequest) -> Page[dict]:
        query = select(UserRow)
        if role:
            query = query.where(UserRow.role == role.value)
        if search:
            like = f"%{search}%"
            query = (
                query.outerjoin(CustomerRow, CustomerRow.user_id == UserRow.id)
                .outerjoin(MasterRow, MasterRow.user_id == UserRow.id)
                .where(
                    or_(
                        UserRow.email.ilike(like),
                        UserRow.phone.ilike(like),
                        CustomerRow.first_name.ilike(like),
                        CustomerRow.last_name.ilike(like),
                        MasterRow.first_name.ilike(like),
                        MasterRow.last_name.ilike(like),
                    )
                )
            )

        total = db.session.execute(select(func.count()).select_from(query.subquery())).scalar_one()
        rows = db.session.execute(
            query.order_by(UserRow.created_at.desc(), UserRow.id.desc()).offset(page.offset).limit(page.limit)
        ).scalars()
        items = [
            {
                "id": int(r.id),
                "email": r.email,
                "phone": r.phone,
                "role": r.role,
                "name": _display_name(r),
                "isActive": bool(r.is_active),
                "emailVerified": r.email_verified_at is not None,
                "customerId": r.customer.id if r.customer else None,
                "masterId": r.master.id if r.master else None,
                "createdAt": r.created_at.isoformat() if r.created_at else None,
            }
            for r in rows
        ]
        return Page(items=items, total=int(total), request=page)
