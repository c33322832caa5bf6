from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import optional_float, optional_int
from ..core.constants import CURRENCY
from ..core.exceptions import NotFoundError, ValidationError
from .model import Category, PriceEstimate
from .repository import CatalogRepository

URGENCY_OPTIONS = (
    {"value": "normal", "label": "Normal (1-3 gün)", "multiplier": 1.0},
    {"value": "urgent", "label": "Təcili (24 saat)", "multiplier": 1.5},
    {"value": "express", "label": "Express (3 saat)", "multiplier": 2.0},
)
URGENCY_MULTIPLIERS = {o["value"]: o["multiplier"] for o in URGENCY_OPTIONS}

AREA_THRESHOLD = 50
AREA_STEP = 0.005


def price_multiplier(urgency: Optional[str], area: Optional[float]) -> float:
    """Urgency factor times the area surcharge above 50 m²."""
    multiplier = URGENCY_MULTIPLIERS.get((urgency or "normal").lower(), 1.0)
    if area and area > AREA_THRESHOLD:
        multiplier *= 1 + (area - AREA_THRESHOLD) * AREA_STEP
    return multiplier


class CatalogService:
    def __init__(self, catalog: CatalogRepository):
        self._catalog = catalog

    def list_categories(self) -> Sequence[Category]:
        return self._catalog.list_categories(active_only=True)

    def category_counts(self) -> dict[int, dict[str, int]]:
        masters = self._catalog.count_masters_by_category()
        orders = self._catalog.count_orders_by_category()
        ids = set(masters) | set(orders)
        return {cid: {"masters": masters.get(cid, 0), "orders": orders.get(cid, 0)} for cid in ids}

    def get_category(self, category_id: int) -> Category:
        category = self._catalog.get_category(category_id)
        if not category:
            raise NotFoundError("Kateqoriya tapılmadı")
        return category

    def calculator_options(self) -> dict:
        return {
            "categories": [
                {
                    "id": c.category_id,
                    "name": c.name,
                    "subcategories": [{"id": s.subcategory_id, "name": s.name} for s in c.subcategories],
                }
                for c in self.list_categories()
            ],
            "urgencyOptions": [dict(o) for o in URGENCY_OPTIONS],
        }

    def estimate(
        self,
        *,
        category_id,
        subcategory_id=None,
        area=None,
        urgency: Optional[str] = None,
    ) -> PriceEstimate:
        category_id = optional_int(category_id, "Kateqoriya")
        if not category_id:
            raise ValidationError("Kateqoriya seçilməyib")
        area = optional_float(area, "Sahə")

        service_prices = list(self._catalog.list_service_prices(category_id))
        prices = service_prices
        if not prices and subcategory_id:
            sub = self._catalog.get_subcategory(optional_int(subcategory_id, "Alt kateqoriya"))
            if sub and sub.base_price:
                # reference price only, it is not a master offering
                prices = [float(sub.base_price)]

        low = min(prices) if prices else 0.0
        high = max(prices) if prices else 0.0
        avg = sum(prices) / len(prices) if prices else 0.0

        multiplier = price_multiplier(urgency, area)
        return PriceEstimate(
            min_price=round(low * multiplier),
            max_price=round(high * multiplier),
            avg_price=round(avg * multiplier),
            masters_available=len(service_prices),
            multiplier=round(multiplier, 4),
            currency=CURRENCY,
            note="Təcili sifariş əlavə haqqı tətbiq edilir" if (urgency or "").lower() == "urgent" else None,
        )
