from __future__ import annotations

from flask import Flask, request

from ..common.auth import json_body, require_actor, role_required
from ..common.pagination import PageRequest
from ..common.responses import ok, ok_page
from ..container import Container
from ..core.enums import Role
from ..orders.presenter import order_json
from ..users.model import SessionUser
from .presenter import master_json, portfolio_json, service_json, slot_json


def register(app: Flask, container: Container) -> None:
    def me() -> SessionUser:
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/masters", methods=["GET"], endpoint="masters")
    def masters():
        page = container.master_directory.search(
            category=request.args.get("category"),
            district=request.args.get("district"),
            search=request.args.get("search"),
            sort=request.args.get("sort"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(page, [master_json(m) for m in page.items])

    @app.route("/api/masters/<int:master_id>", methods=["GET"], endpoint="master_detail")
    def master_detail(master_id: int):
        master, services, reviews = container.master_directory.detail(master_id)
        return ok(master_json(master, services=services, reviews=reviews))

    @app.route("/api/leaderboard", methods=["GET"], endpoint="leaderboard")
    def leaderboard():
        ranked = container.master_directory.leaderboard(
            limit=request.args.get("limit"), category_id=request.args.get("categoryId")
        )
        return ok([{"rank": rank, **master_json(m)} for rank, m in ranked])

    @app.route("/api/master/profile", methods=["GET"], endpoint="master_profile")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_profile():
        master = container.master_panel.profile(me())
        return ok(master_json(master, services=container.master_panel.list_services(me())))

    @app.route("/api/master/profile", methods=["PUT"], endpoint="master_profile_update")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_profile_update():
        master = container.master_panel.update_profile(me(), json_body())
        return ok(master_json(master), message="Profil yeniləndi")

    @app.route("/api/master/services", methods=["GET"], endpoint="master_services")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_services():
        return ok([service_json(s) for s in container.master_panel.list_services(me())])

    @app.route("/api/master/services", methods=["POST"], endpoint="master_services_create")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_services_create():
        service = container.master_panel.create_service(me(), json_body())
        return ok(service_json(service), message="Xidmət əlavə edildi", status=201)

    @app.route("/api/master/services", methods=["PUT"], endpoint="master_services_update")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_services_update():
        service = container.master_panel.update_service(me(), json_body())
        return ok(service_json(service), message="Xidmət yeniləndi")

    @app.route("/api/master/services/<int:service_id>", methods=["DELETE"], endpoint="master_services_delete")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_services_delete(service_id: int):
        container.master_panel.delete_service(me(), service_id)
        return ok(message="Xidmət silindi")

    @app.route("/api/master/stats", methods=["GET"], endpoint="master_stats")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_stats():
        return ok(container.master_panel.stats(me()))

    @app.route("/api/master/analytics", methods=["GET"], endpoint="master_analytics")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_analytics():
        return ok(container.master_panel.analytics(me()))

    @app.route("/api/master/portfolio", methods=["GET"], endpoint="master_portfolio")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_portfolio():
        return ok([portfolio_json(p) for p in container.portfolio_service.list(me())])

    @app.route("/api/master/portfolio", methods=["POST"], endpoint="master_portfolio_add")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_portfolio_add():
        item = container.portfolio_service.add(me(), json_body())
        return ok(portfolio_json(item), message="Portfolio əlavə edildi", status=201)

    @app.route("/api/master/availability", methods=["GET"], endpoint="master_availability")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_availability():
        return ok([slot_json(s) for s in container.availability_service.list(me())])

    @app.route("/api/master/availability", methods=["PUT"], endpoint="master_availability_replace")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_availability_replace():
        slots = container.availability_service.replace(me(), json_body().get("slots"))
        return ok([slot_json(s) for s in slots], message="Mövcudluq yeniləndi")

    @app.route("/api/master/availability", methods=["POST"], endpoint="master_availability_add")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_availability_add():
        slot = container.availability_service.add(me(), json_body())
        return ok(slot_json(slot), message="Slot əlavə edildi", status=201)

    @app.route("/api/master/orders", methods=["GET"], endpoint="master_orders")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_orders():
        page = container.order_service.list_for(
            me(),
            view="master",
            status=request.args.get("status"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(page, [order_json(o) for o in page.items])

    @app.route("/api/master/orders/<int:order_id>/<action>", methods=["POST"], endpoint="master_order_action")
    @role_required(Role.MASTER, Role.ADMIN)
    def master_order_action(order_id: int, action: str):
        data = json_body()
        order = container.order_service.perform(
            me(),
            order_id,
            action,
            final_price=data.get("finalPrice"),
            reason=data.get("cancelReason") or data.get("reason"),
        )
        return ok(order_json(order), message="Sifariş yeniləndi")
