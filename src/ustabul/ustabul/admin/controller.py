from __future__ import annotations

from flask import Flask, request, send_file

from ..common.auth import json_body, require_actor, role_required
from ..common.pagination import PageRequest
from ..common.responses import ok, ok_page
from ..container import Container
from ..core.enums import Role
from ..masters.presenter import admin_master_json, master_json
from ..orders.presenter import order_json
from ..settings.model import SystemSetting
from .export import XLSX_MIMETYPE


def setting_json(s: SystemSetting) -> dict:
    return {
        "key": s.key,
        "value": s.value,
        "typedValue": s.typed_value,
        "type": s.type.value,
        "category": s.category,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }


def register(app: Flask, container: Container) -> None:
    admin_only = role_required(Role.ADMIN)

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_only
    def admin_stats():
        stats, recent = container.admin_service.stats()
        return ok({"stats": stats, "recentOrders": [order_json(o) for o in recent]})

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_only
    def admin_users():
        page = container.user_service.list_admin_view(
            search=request.args.get("search"),
            role=request.args.get("role"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(page, list(page.items))

    @app.route("/api/admin/users/<int:user_id>", methods=["GET"], endpoint="admin_user_detail")
    @admin_only
    def admin_user_detail(user_id: int):
        return ok(container.user_service.get_admin_detail(user_id))

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="admin_user_delete")
    @admin_only
    def admin_user_delete(user_id: int):
        container.user_service.delete_user(current_role=require_actor().role, user_id=user_id)
        return ok(message="İstifadəçi silindi")

    @app.route("/api/admin/users/<int:user_id>/block", methods=["POST", "DELETE"], endpoint="admin_user_block")
    @admin_only
    def admin_user_block(user_id: int):
        blocked = request.method == "POST"
        container.user_service.set_blocked(current_role=require_actor().role, user_id=user_id, blocked=blocked)
        return ok(message="İstifadəçi bloklandı" if blocked else "Blok götürüldü")

    @app.route("/api/admin/masters", methods=["GET"], endpoint="admin_masters")
    @admin_only
    def admin_masters():
        page = container.master_admin.list(search=request.args.get("search"), page=PageRequest.from_args(request.args))
        return ok_page(page, [master_json(m) for m in page.items])

    @app.route("/api/admin/analytics", methods=["GET"], endpoint="admin_analytics")
    @admin_only
    def admin_analytics():
        return ok(container.admin_service.analytics())

    @app.route("/api/admin/masters/<int:master_id>", methods=["GET"], endpoint="admin_master_detail")
    @admin_only
    def admin_master_detail(master_id: int):
        master, user, services, reviews = container.master_admin.detail(master_id)
        return ok(admin_master_json(master, user, services=services, reviews=reviews))

    @app.route("/api/admin/masters/<int:master_id>", methods=["PATCH"], endpoint="admin_master_update")
    @admin_only
    def admin_master_update(master_id: int):
        master = container.master_admin.update(master_id, json_body())
        return ok(master_json(master), message="Usta yeniləndi")

    @app.route("/api/admin/masters/<int:master_id>", methods=["DELETE"], endpoint="admin_master_delete")
    @admin_only
    def admin_master_delete(master_id: int):
        container.master_admin.delete(master_id)
        return ok(message="Usta silindi")

    @app.route("/api/admin/masters/<int:master_id>/badge", methods=["POST"], endpoint="admin_master_badge")
    @admin_only
    def admin_master_badge(master_id: int):
        data = json_body()
        master = container.master_admin.set_badge(master_id, badge=data.get("badge"), action=data.get("action"))
        return ok(master_json(master), message="Nişan yeniləndi")

    @app.route("/api/admin/masters/<int:master_id>/block", methods=["POST", "DELETE"], endpoint="admin_master_block")
    @admin_only
    def admin_master_block(master_id: int):
        blocked = request.method == "POST"
        container.master_admin.set_blocked(master_id, blocked=blocked)
        return ok(message="Usta bloklandı" if blocked else "Blok götürüldü")

    @app.route("/api/admin/orders", methods=["GET"], endpoint="admin_orders")
    @admin_only
    def admin_orders():
        page = container.order_service.list_admin(
            status=request.args.get("status"),
            search=request.args.get("search"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(page, [order_json(o) for o in page.items])

    @app.route("/api/admin/orders/<int:order_id>/refund", methods=["POST"], endpoint="admin_order_refund")
    @admin_only
    def admin_order_refund(order_id: int):
        result = container.payment_service.refund(order_id, amount=json_body().get("amount"))
        return ok(result, message="Ödəniş geri qaytarıldı")

    @app.route("/api/admin/settings", methods=["GET"], endpoint="admin_settings")
    @admin_only
    def admin_settings():
        grouped = container.settings_service.grouped()
        return ok(
            {
                "settings": [setting_json(s) for s in container.settings_service.list_all()],
                "grouped": {category: [setting_json(s) for s in items] for category, items in grouped.items()},
            }
        )

    @app.route("/api/admin/settings", methods=["PUT"], endpoint="admin_settings_update")
    @admin_only
    def admin_settings_update():
        items = container.settings_service.update_many(json_body().get("settings"))
        return ok([setting_json(s) for s in items], message="Tənzimləmələr yadda saxlanıldı")

    @app.route("/api/admin/settings/<key>", methods=["GET"], endpoint="admin_setting_detail")
    @admin_only
    def admin_setting_detail(key: str):
        return ok(setting_json(container.settings_service.get(key)))

    @app.route("/api/admin/settings/<key>", methods=["PATCH"], endpoint="admin_setting_update")
    @admin_only
    def admin_setting_update(key: str):
        return ok(setting_json(container.settings_service.update_one(key, json_body())), message="Yadda saxlanıldı")

    @app.route("/api/admin/export", methods=["GET"], endpoint="admin_export")
    @admin_only
    def admin_export():
        kind = (request.args.get("type") or "orders").lower()
        fmt, payload = container.admin_service.export(kind=kind, fmt=request.args.get("format"))
        if fmt == "xlsx":
            return send_file(
                payload, download_name=f"ustabul_{kind}.xlsx", as_attachment=True, mimetype=XLSX_MIMETYPE
            )
        return ok(payload)
