from __future__ import annotations

import pytest

from src.ustabul.ustabul.catalog.model import Category, Subcategory
from src.ustabul.ustabul.catalog.service import CatalogService, price_multiplier
from src.ustabul.ustabul.core.exceptions import NotFoundError, ValidationError


class InMemoryCatalog:
    def __init__(self, prices=None):
        self.prices = prices or {}
        self.category = Category(
            category_id=1,
            name="Santexnika",
            slug="santexnika",
            subcategories=(Subcategory(subcategory_id=5, category_id=1, name="Kran", slug="kran", base_price=30.0),),
        )

    def list_categories(self, *, active_only=True):
        return [self.category]

    def get_category(self, category_id):
        return self.category if category_id == 1 else None

    def get_subcategory(self, subcategory_id):
        return self.category.subcategories[0] if subcategory_id == 5 else None

    def list_service_prices(self, category_id):
        return self.prices.get(category_id, [])

    def count_masters_by_category(self):
        return {1: 3}

    def count_orders_by_category(self):
        return {1: 7, 2: 1}


def test_multiplier_combines_urgency_and_area():
    assert price_multiplier(None, None) == 1.0
    assert price_multiplier("urgent", 40) == 1.5
    assert price_multiplier("express", None) == 2.0
    assert price_multiplier("normal", 150) == pytest.approx(1.5)


def test_estimate_from_master_prices():
    service = CatalogService(InMemoryCatalog({1: [20.0, 40.0, 60.0]}))

    estimate = service.estimate(category_id="1", urgency="urgent")

    assert (estimate.min_price, estimate.max_price, estimate.avg_price) == (30, 90, 60)
    assert estimate.masters_available == 3
    assert estimate.currency == "AZN"
    assert estimate.note


def test_estimate_falls_back_to_subcategory_base_price():
    service = CatalogService(InMemoryCatalog())

    estimate = service.estimate(category_id=1, subcategory_id=5)

    assert (estimate.min_price, estimate.max_price) == (30, 30)
    assert estimate.masters_available == 0
    assert estimate.note is None


def test_estimate_without_any_price_is_zero():
    estimate = CatalogService(InMemoryCatalog()).estimate(category_id=1)

    assert (estimate.min_price, estimate.max_price, estimate.masters_available) == (0, 0, 0)


def test_estimate_requires_category():
    with pytest.raises(ValidationError):
        CatalogService(InMemoryCatalog()).estimate(category_id=None)


def test_counts_merge_masters_and_orders():
    counts = CatalogService(InMemoryCatalog()).category_counts()

    assert counts == {1: {"masters": 3, "orders": 7}, 2: {"masters": 0, "orders": 1}}


def test_unknown_category():
    with pytest.raises(NotFoundError):
        CatalogService(InMemoryCatalog()).get_category(42)


def test_calculator_options_lists_urgency_levels():
    options = CatalogService(InMemoryCatalog()).calculator_options()

    assert options["categories"][0]["subcategories"] == [{"id": 5, "name": "Kran"}]
    assert [o["value"] for o in options["urgencyOptions"]] == ["normal", "urgent", "express"]
