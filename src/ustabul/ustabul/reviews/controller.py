from __future__ import annotations

from flask import Flask, request

from ..common.auth import json_body, login_required, require_actor
from ..common.pagination import PageRequest
from ..common.responses import ok, ok_page
from ..container import Container
from ..masters.presenter import review_json


def register(app: Flask, container: Container) -> None:
    def me():
        return container.auth_service.session_user(require_actor().user_id)

    @app.route("/api/reviews", methods=["GET"], endpoint="reviews")
    def reviews():
        page, breakdown = container.review_service.list_for_master(
            master_id=request.args.get("masterId"),
            min_rating=request.args.get("minRating"),
            sort_by=request.args.get("sortBy"),
            page=PageRequest.from_args(request.args),
        )
        return ok_page(
            page,
            [review_json(r) for r in page.items],
            ratingBreakdown={str(k): v for k, v in breakdown.items()},
        )

    @app.route("/api/reviews", methods=["POST"], endpoint="reviews_create")
    @login_required
    def reviews_create():
        data = json_body()
        review = container.review_service.create(
            me(),
            order_id=data.get("orderId"),
            rating=data.get("rating"),
            comment=data.get("comment"),
            photos=data.get("photos") or [],
        )
        return ok(review_json(review), message="Rəyiniz əlavə edildi", status=201)

    @app.route("/api/reviews/<int:review_id>/reply", methods=["POST"], endpoint="review_reply")
    @login_required
    def review_reply(review_id: int):
        review = container.review_service.reply(me(), review_id, json_body().get("reply", ""))
        return ok(review_json(review), message="Cavab əlavə edildi")
