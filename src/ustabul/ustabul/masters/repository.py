from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import MasterBadge
from .model import AvailabilitySlot, MasterProfile, NewPortfolioItem, PortfolioItem, ServiceOffering


class MasterRepository(Protocol):
    def get_by_id(self, master_id: int) -> Optional[MasterProfile]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[MasterProfile]:
        raise NotImplementedError

    def search(
        self,
        *,
        category_slug: Optional[str],
        district: Optional[str],
        text: Optional[str],
        sort: str,
        page: PageRequest,
        include_inactive: bool = False,
    ) -> Page[MasterProfile]:
        raise NotImplementedError

    def leaderboard(self, *, limit: int, category_id: Optional[int] = None) -> Sequence[MasterProfile]:
        raise NotImplementedError

    def update_profile(self, master_id: int, **fields) -> MasterProfile:
        raise NotImplementedError

    def set_badge(self, master_id: int, *, badge: MasterBadge, value: bool) -> bool:
        raise NotImplementedError

    def set_active(self, master_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_services(self, master_id: int, *, active_only: bool = False) -> Sequence[ServiceOffering]:
        raise NotImplementedError

    def get_service(self, service_id: int) -> Optional[ServiceOffering]:
        raise NotImplementedError

    def create_service(
        self,
        *,
        master_id: int,
        name: str,
        price: float,
        category_id: Optional[int],
        description: Optional[str],
        duration: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_service(self, service_id: int, **fields) -> ServiceOffering:
        raise NotImplementedError

    def delete_service(self, service_id: int) -> bool:
        raise NotImplementedError


class FavoriteRepository(Protocol):
    def add(self, *, customer_id: int, master_id: int) -> int:
        raise NotImplementedError

    def remove(self, *, customer_id: int, master_id: int) -> bool:
        raise NotImplementedError

    def exists(self, *, customer_id: int, master_id: int) -> bool:
        raise NotImplementedError

    def list_masters(self, customer_id: int) -> Sequence[MasterProfile]:
        raise NotImplementedError


class PortfolioRepository(Protocol):
    def list_for_master(self, master_id: int) -> Sequence[PortfolioItem]:
        raise NotImplementedError

    def create(self, master_id: int, item: NewPortfolioItem) -> PortfolioItem:
        raise NotImplementedError


class AvailabilityRepository(Protocol):
    def list_for_master(self, master_id: int) -> Sequence[AvailabilitySlot]:
        raise NotImplementedError

    def add(self, master_id: int, slot: AvailabilitySlot) -> AvailabilitySlot:
        raise NotImplementedError

    def replace_all(self, master_id: int, slots: Sequence[AvailabilitySlot]) -> Sequence[AvailabilitySlot]:
        """Drop every slot of the master and store `slots` in one transaction."""
        raise NotImplementedError


class MasterActivityRepository(Protocol):
    def period_totals(self, master_id: int, *, start: datetime, end: datetime) -> tuple[int, float]:
        """Orders created in [start, end) and the revenue of the completed ones."""
        raise NotImplementedError
