from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.auth import client_ip, json_body, login_required, require_actor
from ..common.datetime_utils import iso
from ..common.responses import ok
from ..core.exceptions import ValidationError
from ..container import Container
from ..masters.presenter import master_json
from .model import CustomerProfile, SessionUser

logger = logging.getLogger(__name__)


def session_user_json(u: SessionUser) -> dict:
    return {
        "id": u.user_id,
        "email": u.email,
        "name": u.full_name,
        "role": u.role.value,
        "emailVerified": u.email_verified,
        "customerId": u.customer_id,
        "masterId": u.master_id,
    }


def profile_json(p: CustomerProfile) -> dict:
    return {
        "id": p.customer_id,
        "userId": p.user_id,
        "firstName": p.first_name,
        "lastName": p.last_name,
        "phone": p.phone,
        "avatar": p.avatar,
        "address": p.address,
        "district": p.district,
    }


def register(app: Flask, container: Container) -> None:
    def me() -> SessionUser:
        return container.auth_service.session_user(require_actor().user_id)

    def start_session(user: SessionUser, *, remember: bool) -> None:
        session.clear()
        session.permanent = bool(remember)
        session["user_id"] = user.user_id
        session["role"] = user.role.value
        session["name"] = user.full_name

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        user_id = container.auth_service.register(
            email=data.get("email", ""),
            password=data.get("password", ""),
            first_name=data.get("firstName", ""),
            last_name=data.get("lastName", ""),
            phone=data.get("phone"),
            role=data.get("role"),
        )
        user = container.auth_service.session_user(user_id)
        return ok(session_user_json(user), message="Qeydiyyat uğurla tamamlandı", status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        start_session(user, remember=bool(data.get("remember")))
        container.auth_service.record_login(
            user.user_id, ip_address=client_ip(), user_agent=request.headers.get("User-Agent", "")
        )
        logger.info("User %s logged in", user.user_id)
        return ok(session_user_json(user), message="Uğurla daxil oldunuz")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return ok(message="Çıxış edildi")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def auth_me():
        return ok(session_user_json(me()))

    @app.route("/api/auth/login-history", methods=["GET"], endpoint="auth_login_history")
    @login_required
    def auth_login_history():
        events = container.auth_service.login_history(require_actor().user_id)
        return ok(
            [
                {
                    "id": e.event_id,
                    "ipAddress": e.ip_address,
                    "userAgent": e.user_agent,
                    "device": e.device,
                    "createdAt": iso(e.created_at),
                }
                for e in events
            ]
        )

    def otp_send(email: str):
        dispatch = container.otp_service.send(email)
        data = {"email": dispatch.email, "expiresAt": iso(dispatch.expires_at)}
        if dispatch.code:
            data["otpCode"] = dispatch.code
        return ok(data, message="Təsdiq kodu emailinizə göndərildi")

    def otp_verify(email: str, code: str):
        if container.otp_service.verify(email, code):
            return ok(message="Email uğurla təsdiqləndi")
        return ok(message="Email artıq təsdiqlənib")

    @app.route("/api/auth/otp/send", methods=["POST"], endpoint="auth_otp_send")
    def auth_otp_send():
        return otp_send(json_body().get("email", ""))

    @app.route("/api/auth/otp/verify", methods=["POST"], endpoint="auth_otp_verify")
    def auth_otp_verify():
        data = json_body()
        return otp_verify(data.get("email", ""), data.get("otpCode") or data.get("code") or "")

    @app.route("/api/auth/otp", methods=["POST"], endpoint="auth_otp")
    def auth_otp():
        data = json_body()
        action = (data.get("action") or "send").lower()
        if action == "verify":
            return otp_verify(data.get("email", ""), data.get("code") or data.get("otpCode") or "")
        if action == "send":
            return otp_send(data.get("email", ""))
        raise ValidationError("Yanlış əməliyyat")

    @app.route("/api/auth/upgrade-to-master", methods=["POST"], endpoint="auth_upgrade_to_master")
    @login_required
    def auth_upgrade_to_master():
        data = json_body()
        actor = require_actor()
        master_id = container.auth_service.upgrade_to_master(
            user_id=actor.user_id,
            first_name=data.get("firstName"),
            last_name=data.get("lastName"),
            phone=data.get("phone"),
            bio=data.get("bio"),
            experience=data.get("experience") or 0,
            category_slugs=data.get("categories") or [],
            districts=data.get("districts") or [],
        )
        user = container.auth_service.session_user(actor.user_id)
        session["role"] = user.role.value
        session["name"] = user.full_name
        return ok(
            {"user": session_user_json(user), "masterId": master_id},
            message="Usta profiliniz yaradıldı",
        )

    @app.route("/api/user/profile", methods=["GET"], endpoint="user_profile")
    @login_required
    def user_profile():
        return ok(profile_json(container.user_service.get_profile(require_actor().user_id)))

    @app.route("/api/user/profile", methods=["PATCH"], endpoint="user_profile_update")
    @login_required
    def user_profile_update():
        profile = container.user_service.update_profile(require_actor().user_id, json_body())
        session["name"] = profile.full_name
        return ok(profile_json(profile), message="Profil yeniləndi")

    @app.route("/api/user/favorites", methods=["GET"], endpoint="user_favorites")
    @login_required
    def user_favorites():
        return ok([master_json(m) for m in container.favorite_service.list(me())])

    @app.route("/api/user/favorites", methods=["POST"], endpoint="user_favorites_add")
    @login_required
    def user_favorites_add():
        container.favorite_service.add(me(), json_body().get("masterId"))
        return ok(message="Seçilmişlərə əlavə edildi", status=201)

    @app.route("/api/user/favorites", methods=["DELETE"], endpoint="user_favorites_remove")
    @login_required
    def user_favorites_remove():
        master_id = json_body().get("masterId") or request.args.get("masterId")
        container.favorite_service.remove(me(), master_id)
        return ok(message="Seçilmişlərdən silindi")
