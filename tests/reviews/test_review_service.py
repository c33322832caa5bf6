from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Optional

import pytest

from src.ustabul.ustabul.common.pagination import Page, PageRequest
from src.ustabul.ustabul.core.enums import NotificationType, OrderStatus
from src.ustabul.ustabul.core.exceptions import AuthorizationError, ValidationError
from src.ustabul.ustabul.reviews.model import Review
from src.ustabul.ustabul.reviews.service import ReviewService


class InMemoryReviews:
    def __init__(self):
        self.items: dict[int, Review] = {}
        self.ratings: dict[int, float] = {}

    def get(self, review_id: int) -> Optional[Review]:
        return self.items.get(review_id)

    def get_by_order(self, order_id: int) -> Optional[Review]:
        return next((r for r in self.items.values() if r.order_id == order_id), None)

    def create_and_rate(self, *, order_id, customer_id, master_id, rating, comment, photos) -> int:
        review_id = len(self.items) + 1
        self.items[review_id] = Review(
            review_id=review_id,
            order_id=order_id,
            customer_id=customer_id,
            master_id=master_id,
            rating=rating,
            created_at=datetime(2025, 3, 10, 12, 0),
            comment=comment,
            photos=tuple(photos),
        )
        mine = [r.rating for r in self.items.values() if r.master_id == master_id]
        self.ratings[master_id] = round(sum(mine) / len(mine), 1)
        return review_id

    def list_for_master(self, master_id, *, min_rating, sort, page: PageRequest):
        items = [r for r in self.items.values() if r.master_id == master_id and r.rating >= (min_rating or 0)]
        return Page(items=items[page.offset : page.offset + page.limit], total=len(items), request=page)

    def rating_breakdown(self, master_id: int) -> dict[int, int]:
        counts = {star: 0 for star in range(1, 6)}
        for r in self.items.values():
            if r.master_id == master_id:
                counts[r.rating] += 1
        return counts

    def set_reply(self, review_id: int, *, reply: str, replied_at: datetime) -> bool:
        review = self.items[review_id]
        if review.reply:
            return False
        self.items[review_id] = dataclasses.replace(review, reply=reply, replied_at=replied_at)
        return True


@pytest.fixture
def setup(orders_store, make_order, notifier):
    orders = orders_store(
        make_order(status=OrderStatus.COMPLETED),
        make_order(order_id=101, status=OrderStatus.COMPLETED),
        make_order(order_id=102, status=OrderStatus.IN_PROGRESS),
    )
    reviews = InMemoryReviews()
    return ReviewService(reviews, orders, None, notifier), reviews


def test_review_updates_master_rating(setup, customer, notification_log):
    service, reviews = setup

    service.create(customer, order_id=100, rating=5, comment="Əla iş")
    service.create(customer, order_id=101, rating="4")

    assert reviews.ratings[20] == 4.5
    assert notification_log.types_for(2) == [NotificationType.REVIEW_NEW, NotificationType.REVIEW_NEW]


@pytest.mark.parametrize("rating", [0, 6, "x", None, 4.7, "4.5", True, False])
def test_rating_must_be_between_one_and_five(setup, customer, rating):
    service, _ = setup

    with pytest.raises(ValidationError):
        service.create(customer, order_id=100, rating=rating)


def test_only_completed_orders_can_be_reviewed(setup, customer):
    service, _ = setup

    with pytest.raises(ValidationError):
        service.create(customer, order_id=102, rating=5)


def test_one_review_per_order(setup, customer):
    service, _ = setup
    service.create(customer, order_id=100, rating=5)

    with pytest.raises(ValidationError):
        service.create(customer, order_id=100, rating=3)


def test_master_cannot_review_own_job(setup, master):
    service, _ = setup

    with pytest.raises(AuthorizationError):
        service.create(master, order_id=100, rating=5)


def test_master_replies_once(setup, customer, master, other_master, fixed_now):
    service, _ = setup
    review = service.create(customer, order_id=100, rating=4)

    with pytest.raises(AuthorizationError):
        service.reply(other_master, review.review_id, "Təşəkkürlər")

    replied = service.reply(master, review.review_id, "Təşəkkürlər", now=fixed_now)
    assert replied.reply == "Təşəkkürlər"
    assert replied.replied_at == fixed_now

    with pytest.raises(ValidationError):
        service.reply(master, review.review_id, "Yenə")


def test_listing_returns_breakdown(setup, customer):
    service, _ = setup
    service.create(customer, order_id=100, rating=5)
    service.create(customer, order_id=101, rating=3)

    page, breakdown = service.list_for_master(master_id="20", min_rating=4, page=PageRequest())

    assert [r.rating for r in page.items] == [5]
    assert breakdown == {1: 0, 2: 0, 3: 1, 4: 0, 5: 1}


def test_listing_requires_master(setup):
    service, _ = setup

    with pytest.raises(ValidationError):
        service.list_for_master(master_id=None, page=PageRequest())
