from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Category, Subcategory


class CatalogRepository(Protocol):
    def list_categories(self, *, active_only: bool = True) -> Sequence[Category]:
        raise NotImplementedError

    def get_category(self, category_id: int) -> Optional[Category]:
        raise NotImplementedError

    def get_subcategory(self, subcategory_id: int) -> Optional[Subcategory]:
        raise NotImplementedError

    def count_masters_by_category(self) -> dict[int, int]:
        raise NotImplementedError

    def count_orders_by_category(self) -> dict[int, int]:
        raise NotImplementedError

    def list_service_prices(self, category_id: int) -> Sequence[float]:
        """Prices of active services offered by active masters in the category."""
        raise NotImplementedError
