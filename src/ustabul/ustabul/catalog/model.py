from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Subcategory:
    subcategory_id: int
    category_id: int
    name: str
    slug: str
    description: Optional[str] = None
    base_price: Optional[float] = None
    order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class Category:
    category_id: int
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    order: int = 0
    is_active: bool = True
    subcategories: tuple[Subcategory, ...] = ()


@dataclass(frozen=True)
class PriceEstimate:
    min_price: int
    max_price: int
    avg_price: int
    masters_available: int
    multiplier: float
    currency: str
    note: Optional[str] = None
