from __future__ import annotations

from typing import Any, Optional

from flask import jsonify

from .pagination import Page


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def ok_page(page: Page, items: list, **extra: Any):
    return ok(items, pagination=page.meta(), **extra)


def fail(error: str, status: int):
    return jsonify({"success": False, "error": error}), status
