from __future__ import annotations

from flask import Flask

from ..common.auth import json_body, login_required, require_actor
from ..common.responses import ok
from ..container import Container
from .service import message_json


def register(app: Flask, container: Container) -> None:
    def me():
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/messages", methods=["GET"], endpoint="conversations")
    @login_required
    def conversations():
        return ok(container.messaging_service.list_conversations(me()))

    @app.route("/api/messages", methods=["POST"], endpoint="messages_send")
    @login_required
    def messages_send():
        data = json_body()
        message = container.messaging_service.send(
            me(),
            content=data.get("content"),
            conversation_id=data.get("conversationId"),
            receiver_id=data.get("receiverId"),
            order_id=data.get("orderId"),
            receiver_type=data.get("receiverType"),
        )
        return ok(message_json(message), message="Mesaj göndərildi", status=201)

    @app.route("/api/messages/<int:conversation_id>", methods=["GET"], endpoint="conversation_detail")
    @login_required
    def conversation_detail(conversation_id: int):
        return ok(container.messaging_service.open_conversation(me(), conversation_id))
