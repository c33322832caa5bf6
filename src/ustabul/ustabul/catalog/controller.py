from __future__ import annotations

from flask import Flask, request

from ..common.auth import json_body
from ..common.responses import ok
from ..container import Container
from .model import Category, PriceEstimate

TRUE_VALUES = {"1", "true", "yes"}


def category_json(c: Category, *, with_subcategories: bool = False, counts: dict | None = None) -> dict:
    data = {
        "id": c.category_id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "icon": c.icon,
        "color": c.color,
        "order": c.order,
    }
    if with_subcategories:
        data["subcategories"] = [
            {
                "id": s.subcategory_id,
                "name": s.name,
                "slug": s.slug,
                "description": s.description,
                "basePrice": s.base_price,
            }
            for s in c.subcategories
        ]
    if counts is not None:
        data["_count"] = counts.get(c.category_id, {"masters": 0, "orders": 0})
    return data


def estimate_json(e: PriceEstimate) -> dict:
    return {
        "estimated": e.avg_price,
        "min": e.min_price,
        "max": e.max_price,
        "mastersAvailable": e.masters_available,
        "multiplier": e.multiplier,
        "currency": e.currency,
        "note": e.note,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/categories", methods=["GET"], endpoint="categories")
    def categories():
        with_subs = (request.args.get("includeSubcategories") or "").lower() in TRUE_VALUES
        with_counts = (request.args.get("includeCount") or "").lower() in TRUE_VALUES
        counts = container.catalog_service.category_counts() if with_counts else None
        return ok(
            [
                category_json(c, with_subcategories=with_subs, counts=counts)
                for c in container.catalog_service.list_categories()
            ]
        )

    @app.route("/api/calculator", methods=["GET"], endpoint="calculator_options")
    def calculator_options():
        return ok(container.catalog_service.calculator_options())

    @app.route("/api/calculator", methods=["POST"], endpoint="calculator_estimate")
    def calculator_estimate():
        data = json_body()
        estimate = container.catalog_service.estimate(
            category_id=data.get("categoryId"),
            subcategory_id=data.get("subcategoryId"),
            area=data.get("area"),
            urgency=data.get("urgency"),
        )
        return ok(estimate_json(estimate))
