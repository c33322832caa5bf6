from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Who is calling, as stored in the Flask session after login."""

    user_id: int
    role: Role
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def current_actor() -> Optional[Actor]:
    if "user_id" not in session:
        return None
    return Actor(user_id=int(session["user_id"]), role=Role(session.get("role")), name=session.get("name", ""))


def require_actor() -> Actor:
    actor = current_actor()
    if not actor:
        raise AuthenticationError("Daxil olmamısınız")
    return actor


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        require_actor()
        return view(*args, **kwargs)

    return wrapper


def role_required(*roles: Role):
    allowed = set(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = require_actor()
            if actor.role not in allowed:
                raise AuthorizationError("İcazə yoxdur")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or request.remote_addr or "unknown"
