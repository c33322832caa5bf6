from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import Role
from .model import CustomerProfile, LoginEvent, User


class UserRepository(Protocol):
    """Repository interface for accounts and customer profiles.

    Services depend on this interface, never on the SQLAlchemy tables.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[User]:
        raise NotImplementedError

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
        raise NotImplementedError

    def set_otp(self, user_id: int, *, code: Optional[str], expires_at: Optional[datetime]) -> bool:
        raise NotImplementedError

    def mark_email_verified(self, user_id: int, *, verified_at: datetime) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def has_orders(self, user_id: int) -> bool:
        raise NotImplementedError

    def get_customer_profile(self, user_id: int) -> Optional[CustomerProfile]:
        raise NotImplementedError

    def get_customer_by_id(self, customer_id: int) -> Optional[CustomerProfile]:
        raise NotImplementedError

    def ensure_customer_profile(self, user_id: int) -> CustomerProfile:
        raise NotImplementedError

    def update_customer_profile(self, user_id: int, **fields) -> CustomerProfile:
        raise NotImplementedError

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
        raise NotImplementedError

    def add_login_event(self, user_id: int, *, ip_address: str, user_agent: str, device: str) -> int:
        raise NotImplementedError

    def list_login_events(self, user_id: int, *, limit: int) -> Sequence[LoginEvent]:
        raise NotImplementedError

    def list_admin_view(self, *, search: Optional[str], role: Optional[Role], page: PageRequest) -> Page[dict]:
        raise NotImplementedError
