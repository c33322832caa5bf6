from __future__ import annotations

from flask import Flask

from ..common.auth import json_body, login_required, require_actor
from ..common.datetime_utils import iso
from ..common.responses import ok
from ..common.validators import require_int
from ..container import Container
from .model import Notification


def notification_json(n: Notification) -> dict:
    return {
        "id": n.notification_id,
        "type": n.type.value,
        "title": n.title,
        "message": n.message,
        "data": n.data,
        "isRead": n.is_read,
        "readAt": iso(n.read_at),
        "createdAt": iso(n.created_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="notifications")
    @login_required
    def notifications():
        items, unread = container.notification_service.list_recent(require_actor().user_id)
        return ok([notification_json(n) for n in items], unreadCount=unread)

    @app.route("/api/notifications", methods=["POST"], endpoint="notifications_read")
    @login_required
    def notifications_read():
        data = json_body()
        user_id = require_actor().user_id
        if data.get("markAll"):
            count = container.notification_service.mark_all_read(user_id)
            return ok({"updated": count}, message="Bütün bildirişlər oxundu")
        container.notification_service.mark_read(user_id, require_int(data.get("id"), "Bildiriş"))
        return ok(message="Bildiriş oxundu")

    @app.route("/api/notifications", methods=["DELETE"], endpoint="notifications_delete")
    @login_required
    def notifications_delete():
        data = json_body()
        user_id = require_actor().user_id
        if data.get("deleteAll"):
            count = container.notification_service.delete_all(user_id)
            return ok({"deleted": count}, message="Bütün bildirişlər silindi")
        container.notification_service.delete(user_id, require_int(data.get("id"), "Bildiriş"))
        return ok(message="Bildiriş silindi")
