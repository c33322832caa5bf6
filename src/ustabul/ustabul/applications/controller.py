from __future__ import annotations

from flask import Flask, request

from ..common.auth import json_body, login_required, require_actor
from ..common.responses import ok
from ..container import Container
from ..users.model import SessionUser
from .presenter import application_json


def register(app: Flask, container: Container) -> None:
    def me() -> SessionUser:
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/applications", methods=["GET"], endpoint="applications")
    @login_required
    def applications():
        items = container.application_service.list_for(
            me(), order_id=request.args.get("orderId"), master_id=request.args.get("masterId")
        )
        return ok([application_json(a) for a in items])

    @app.route("/api/applications", methods=["POST"], endpoint="applications_create")
    @login_required
    def applications_create():
        data = json_body()
        application = container.application_service.apply(
            me(),
            order_id=data.get("orderId"),
            price=data.get("price"),
            message=data.get("message"),
            estimated_duration=data.get("estimatedDuration"),
        )
        return ok(application_json(application), message="Müraciət göndərildi", status=201)

    @app.route("/api/applications/<int:application_id>", methods=["GET"], endpoint="application_detail")
    @login_required
    def application_detail(application_id: int):
        return ok(application_json(container.application_service.get_for(me(), application_id)))

    @app.route("/api/applications/<int:application_id>", methods=["PATCH"], endpoint="application_update")
    @login_required
    def application_update(application_id: int):
        data = json_body()
        application = container.application_service.decide(
            me(), application_id, data.get("action", ""), rejected_reason=data.get("rejectedReason")
        )
        return ok(application_json(application), message="Müraciət yeniləndi")

    @app.route("/api/applications/<int:application_id>", methods=["DELETE"], endpoint="application_delete")
    @login_required
    def application_delete(application_id: int):
        container.application_service.delete(me(), application_id)
        return ok(message="Müraciət silindi")
