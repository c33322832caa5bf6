from __future__ import annotations

import logging
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.pagination import Page, PageRequest
from ..common.validators import normalize_phone, require_email, require_min_length, require_non_empty
from ..core.constants import LOGIN_HISTORY_LIMIT, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from ..masters.repository import MasterRepository
from .model import CustomerProfile, LoginEvent, SessionUser
from .repository import UserRepository

logger = logging.getLogger(__name__)


def detect_device(user_agent: str) -> str:
    ua = (user_agent or "").lower()
    if "ipad" in ua or "tablet" in ua:
        return "Tablet"
    if "mobile" in ua or "android" in ua or "iphone" in ua:
        return "Mobile"
    return "Desktop"


class AuthService:
    """Use cases: register, login, session info and upgrade to master."""

    def __init__(self, users: UserRepository, masters: MasterRepository, *, require_verified_email: bool = False):
        self._users = users
        self._masters = masters
        self._require_verified_email = require_verified_email

    def register(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: Optional[str] = None,
    ) -> int:
        if not email or not password or not first_name or not last_name:
            raise ValidationError("Bütün sahələri doldurun")

        email = require_email(email)
        require_min_length(password, "Şifrə", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "Ad")
        last_name = require_non_empty(last_name, "Soyad")
        phone = normalize_phone(phone)

        if self._users.get_by_email(email):
            raise ValidationError("Bu email artıq qeydiyyatdan keçib")
        if phone and self._users.get_by_phone(phone):
            raise ValidationError("Bu telefon nömrəsi artıq qeydiyyatdan keçib")

        account_role = Role.MASTER if (role or "").upper() == Role.MASTER.value else Role.CUSTOMER
        user_id = self._users.create_user(
            email=email,
            phone=phone,
            password_hash=generate_password_hash(password),
            role=account_role,
            first_name=first_name,
            last_name=last_name,
        )
        logger.info("Registered user %s as %s", user_id, account_role.value)
        return user_id

    def session_user(self, user_id: int) -> SessionUser:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")

        customer = self._users.get_customer_profile(user.user_id)
        master = self._masters.get_by_user_id(user.user_id)
        if master:
            full_name = master.full_name
        elif customer:
            full_name = customer.full_name
        else:
            full_name = user.email

        return SessionUser(
            user_id=user.user_id,
            email=user.email,
            full_name=full_name,
            role=user.role,
            email_verified=user.email_verified,
            customer_id=customer.customer_id if customer else None,
            master_id=master.master_id if master else None,
        )

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Email və ya şifrə yanlışdır")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes or corrupted values
            ok = False
        if not ok:
            raise AuthenticationError("Email və ya şifrə yanlışdır")

        if not user.is_active:
            raise AuthorizationError("Hesabınız bloklanıb")
        if self._require_verified_email and not user.email_verified:
            raise AuthenticationError("Email təsdiqlənməyib")

        return self.session_user(user.user_id)

    def record_login(self, user_id: int, *, ip_address: str, user_agent: str) -> None:
        self._users.add_login_event(
            user_id, ip_address=ip_address, user_agent=user_agent, device=detect_device(user_agent)
        )

    def login_history(self, user_id: int) -> Sequence[LoginEvent]:
        return self._users.list_login_events(user_id, limit=LOGIN_HISTORY_LIMIT)

    def upgrade_to_master(
        self,
        *,
        user_id: int,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone: Optional[str] = None,
        bio: Optional[str] = None,
        experience: int = 0,
        category_slugs: Sequence[str] = (),
        districts: Sequence[str] = (),
    ) -> int:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        if self._masters.get_by_user_id(user_id):
            raise ValidationError("Siz artıq usta kimi qeydiyyatdasınız")

        customer = self._users.get_customer_profile(user_id)
        first_name = (first_name or "").strip() or (customer.first_name if customer else "")
        last_name = (last_name or "").strip() or (customer.last_name if customer else "")
        first_name = require_non_empty(first_name, "Ad")
        if int(experience or 0) < 0:
            raise ValidationError("Təcrübə mənfi ola bilməz")

        master_id = self._users.promote_to_master(
            user_id,
            first_name=first_name,
            last_name=last_name,
            phone=normalize_phone(phone) or user.phone,
            bio=(bio or "").strip() or None,
            experience=int(experience or 0),
            category_slugs=[s for s in category_slugs if s],
            districts=[d for d in districts if d],
        )
        logger.info("User %s upgraded to master %s", user_id, master_id)
        return master_id


class UserService:
    """Use cases: own profile and user administration."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get_profile(self, user_id: int) -> CustomerProfile:
        if not self._users.get_by_id(user_id):
            raise NotFoundError("İstifadəçi tapılmadı")
        return self._users.ensure_customer_profile(user_id)

    def update_profile(self, user_id: int, changes: dict) -> CustomerProfile:
        fields: dict = {}
        if "firstName" in changes:
            fields["first_name"] = require_non_empty(changes.get("firstName"), "Ad")
        if "lastName" in changes:
            fields["last_name"] = (changes.get("lastName") or "").strip()
        if "phone" in changes:
            phone = normalize_phone(changes.get("phone"))
            other = self._users.get_by_phone(phone) if phone else None
            if other and other.user_id != int(user_id):
                raise ValidationError("Bu telefon nömrəsi artıq qeydiyyatdan keçib")
            fields["phone"] = phone
        for key, name in (("avatar", "avatar"), ("address", "address"), ("district", "district")):
            if key in changes:
                fields[name] = (changes.get(key) or "").strip() or None
        return self._users.update_customer_profile(user_id, **fields)

    def list_admin_view(self, *, search: Optional[str], role: Optional[str], page: PageRequest) -> Page[dict]:
        try:
            role_filter = Role(role.upper()) if role else None
        except ValueError:
            raise ValidationError("Rol yanlışdır")
        return self._users.list_admin_view(search=(search or "").strip() or None, role=role_filter, page=page)

    def get_admin_detail(self, user_id: int) -> dict:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        customer = self._users.get_customer_profile(user_id)
        return {
            "id": user.user_id,
            "email": user.email,
            "phone": user.phone,
            "role": user.role.value,
            "isActive": user.is_active,
            "emailVerified": user.email_verified,
            "createdAt": user.created_at.isoformat() if user.created_at else None,
            "customer": (
                {"id": customer.customer_id, "firstName": customer.first_name, "lastName": customer.last_name}
                if customer
                else None
            ),
            "loginHistory": [
                {"ip": e.ip_address, "device": e.device, "createdAt": e.created_at.isoformat()}
                for e in self._users.list_login_events(user_id, limit=LOGIN_HISTORY_LIMIT)
            ],
        }

    def set_blocked(self, *, current_role: Role, user_id: int, blocked: bool) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("İcazə yoxdur")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin hesabı bloklana bilməz")

        self._users.set_active(user_id, is_active=not blocked)
        logger.info("User %s %s", user_id, "blocked" if blocked else "unblocked")

    def delete_user(self, *, current_role: Role, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("İcazə yoxdur")

        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin hesabı silinə bilməz")
        if self._users.has_orders(user_id):
            raise ValidationError("Sifarişləri olan istifadəçi silinə bilməz, onu bloklayın")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("İstifadəçini silmək alınmadı")
