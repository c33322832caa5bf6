from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import PortfolioType


@dataclass(frozen=True)
class CategoryRef:
    category_id: int
    name: str
    slug: str


@dataclass(frozen=True)
class MasterProfile:
    """Ustanın ictimai profili."""

    master_id: int
    user_id: int
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    district: Optional[str] = None
    districts: tuple[str, ...] = ()
    experience: int = 0
    hourly_rate: Optional[float] = None
    rating: float = 0.0
    review_count: int = 0
    completed_jobs: int = 0
    is_verified: bool = False
    is_premium: bool = False
    is_insured: bool = False
    is_active: bool = True
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    categories: tuple[CategoryRef, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class ServiceOffering:
    """A priced service a master offers (e.g. "Kran təmiri - 25 AZN")."""

    service_id: int
    master_id: int
    name: str
    price: float
    category_id: Optional[int] = None
    description: Optional[str] = None
    duration: Optional[int] = None
    is_active: bool = True


@dataclass(frozen=True)
class PortfolioItem:
    item_id: int
    master_id: int
    title: str
    url: str
    type: PortfolioType = PortfolioType.IMAGE
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    before_image: Optional[str] = None
    after_image: Optional[str] = None
    images: tuple[str, ...] = ()
    category: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewPortfolioItem:
    title: str
    url: str
    type: PortfolioType = PortfolioType.IMAGE
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    before_image: Optional[str] = None
    after_image: Optional[str] = None
    images: tuple[str, ...] = ()
    category: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None


@dataclass(frozen=True)
class AvailabilitySlot:
    """A working window on one day; is_available=False marks a day off."""

    date: date
    start_time: str
    end_time: str
    is_available: bool = True
    slot_id: Optional[int] = None
    master_id: Optional[int] = None
