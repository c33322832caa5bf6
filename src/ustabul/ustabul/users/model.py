from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Hesab (giriş məlumatları); profillər ayrıca saxlanılır."""

    user_id: int
    email: str
    phone: Optional[str]
    password_hash: str
    role: Role
    is_active: bool = True
    email_verified_at: Optional[datetime] = None
    otp_code: Optional[str] = None
    otp_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def email_verified(self) -> bool:
        return self.email_verified_at is not None


@dataclass(frozen=True)
class CustomerProfile:
    customer_id: int
    user_id: int
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class LoginEvent:
    event_id: int
    user_id: int
    ip_address: Optional[str]
    user_agent: Optional[str]
    device: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class SessionUser:
    """The logged-in caller with both profile ids resolved."""

    user_id: int
    email: str
    full_name: str
    role: Role
    email_verified: bool
    customer_id: Optional[int] = None
    master_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
