from __future__ import annotations

from flask import Flask, request

from ..applications.presenter import application_json
from ..common.auth import json_body, login_required, require_actor
from ..common.pagination import PageRequest
from ..common.responses import ok, ok_page
from ..container import Container
from ..users.model import SessionUser
from .presenter import order_json


def register(app: Flask, container: Container) -> None:
    def me() -> SessionUser:
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/orders", methods=["GET"], endpoint="orders")
    @login_required
    def orders():
        page = container.order_service.list_for(
            me(),
            view=request.args.get("role"),
            status=request.args.get("status"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(page, [order_json(o) for o in page.items])

    @app.route("/api/orders", methods=["POST"], endpoint="orders_create")
    @login_required
    def orders_create():
        order = container.order_service.create(me(), json_body())
        return ok(order_json(order), message="Sifariş yaradıldı", status=201)

    @app.route("/api/orders/open", methods=["GET"], endpoint="orders_open")
    @login_required
    def orders_open():
        page = container.order_service.list_open(
            me(), category_id=request.args.get("categoryId"), page=PageRequest.from_args(request.args)
        )
        return ok_page(page, [order_json(o) for o in page.items])

    @app.route("/api/orders/<int:order_id>", methods=["GET"], endpoint="order_detail")
    @login_required
    def order_detail(order_id: int):
        return ok(order_json(container.order_service.get_for(me(), order_id)))

    @app.route("/api/orders/<int:order_id>", methods=["PATCH"], endpoint="order_update")
    @login_required
    def order_update(order_id: int):
        data = json_body()
        order = container.order_service.perform(
            me(),
            order_id,
            data.get("action", ""),
            final_price=data.get("finalPrice"),
            reason=data.get("cancelReason"),
        )
        return ok(order_json(order), message="Sifariş yeniləndi")

    @app.route("/api/orders/<int:order_id>/track", methods=["GET"], endpoint="order_track")
    @login_required
    def order_track(order_id: int):
        return ok(container.order_service.track(me(), order_id))

    @app.route("/api/orders/<int:order_id>/applications", methods=["GET"], endpoint="order_applications")
    @login_required
    def order_applications(order_id: int):
        items = container.application_service.list_for_order(me(), order_id)
        return ok([application_json(a) for a in items])
