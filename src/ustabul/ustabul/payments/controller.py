from __future__ import annotations

from flask import Flask, request

from ..common.auth import json_body, login_required, require_actor
from ..common.responses import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def me():
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/payments", methods=["POST"], endpoint="payments_create")
    @login_required
    def payments_create():
        data = json_body()
        result = container.payment_service.initialize(
            me(), order_id=data.get("orderId"), amount=data.get("amount"), method=data.get("method")
        )
        return ok(result, message=result.pop("message", None))

    @app.route("/api/payments", methods=["GET"], endpoint="payments_status")
    @login_required
    def payments_status():
        return ok(container.payment_service.status(me(), request.args.get("orderId")))

    @app.route("/api/payments/webhook", methods=["POST"], endpoint="payments_webhook")
    def payments_webhook():
        status = container.payment_service.handle_webhook(
            raw_body=request.get_data(cache=True),
            signature=request.headers.get("X-Signature"),
            payload=json_body(),
        )
        return ok({"paymentStatus": status.value})
