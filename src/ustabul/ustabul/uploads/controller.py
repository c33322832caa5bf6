from __future__ import annotations

from flask import Flask, request, send_file

from ..common.auth import login_required
from ..common.responses import ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/upload", methods=["POST"], endpoint="upload")
    @login_required
    def upload():
        stored = container.upload_service.save(request.files.get("file"), folder=request.form.get("folder"))
        return ok(stored.to_dict(), message="Fayl yükləndi", status=201)

    @app.route("/media/<folder>/<name>", methods=["GET"], endpoint="media")
    def media(folder: str, name: str):
        return send_file(container.upload_service.resolve(folder, name))
