from __future__ import annotations

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_email
from ..core.constants import OTP_TTL_MINUTES
from ..core.exceptions import NotFoundError, ValidationError
from ..integrations.email import EmailSender
from .repository import UserRepository

logger = logging.getLogger(__name__)

OTP_SUBJECT = "UstaBul - Təsdiq kodu"


def generate_otp() -> str:
    """Six digit numeric code, never starting with 0."""
    return str(100000 + secrets.randbelow(900000))


def render_otp_email(code: str, ttl_minutes: int) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 480px; margin: 0 auto;">'
        '<h2 style="color: #2563eb;">UstaBul</h2>'
        "<p>Email ünvanınızı təsdiqləmək üçün kodunuz:</p>"
        f'<p style="font-size: 32px; font-weight: bold; letter-spacing: 8px;">{code}</p>'
        f"<p>Kod {ttl_minutes} dəqiqə ərzində etibarlıdır.</p>"
        '<p style="color: #6b7280; font-size: 12px;">Bu sorğunu siz etməmisinizsə, məktubu nəzərə almayın.</p>'
        "</div>"
    )


@dataclass(frozen=True)
class OtpDispatch:
    email: str
    expires_at: datetime
    code: Optional[str] = None


class OtpService:
    """E-mail verification with one-time codes."""

    def __init__(
        self,
        users: UserRepository,
        mailer: EmailSender,
        *,
        ttl_minutes: int = OTP_TTL_MINUTES,
        expose_code: bool = False,
        code_factory: Callable[[], str] = generate_otp,
    ):
        self._users = users
        self._mailer = mailer
        self._ttl_minutes = int(ttl_minutes)
        self._expose_code = bool(expose_code)
        self._code_factory = code_factory

    def send(self, email: str, *, now: Optional[datetime] = None) -> OtpDispatch:
        if not email:
            raise ValidationError("Email tələb olunur")
        email = require_email(email)
        now = now or now_local()

        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        if user.email_verified:
            raise ValidationError("Bu email artıq təsdiqlənib")

        code = self._code_factory()
        expires_at = now + timedelta(minutes=self._ttl_minutes)
        self._users.set_otp(user.user_id, code=code, expires_at=expires_at)

        self._mailer.send(to=email, subject=OTP_SUBJECT, html=render_otp_email(code, self._ttl_minutes))
        logger.info("OTP sent to user %s", user.user_id)

        return OtpDispatch(email=email, expires_at=expires_at, code=code if self._expose_code else None)

    def verify(self, email: str, code: str, *, now: Optional[datetime] = None) -> bool:
        """Return True when the e-mail gets verified now, False when it already was."""
        if not email or not code:
            raise ValidationError("Email və kod tələb olunur")
        email = require_email(email)
        now = now or now_local()

        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("İstifadəçi tapılmadı")
        if user.email_verified:
            return False

        if not user.otp_code or not user.otp_expires_at:
            raise ValidationError("Təsdiq kodu tapılmadı. Yenidən göndərin")
        if now > user.otp_expires_at:
            raise ValidationError("Təsdiq kodunun müddəti bitib")
        if not hmac.compare_digest(user.otp_code, str(code).strip()):
            raise ValidationError("Təsdiq kodu yanlışdır")

        self._users.mark_email_verified(user.user_id, verified_at=now)
        logger.info("E-mail verified for user %s", user.user_id)
        return True
