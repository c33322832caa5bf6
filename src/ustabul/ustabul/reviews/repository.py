from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import Review


class ReviewRepository(Protocol):
    def get(self, review_id: int) -> Optional[Review]:
        raise NotImplementedError

    def get_by_order(self, order_id: int) -> Optional[Review]:
        raise NotImplementedError

    def create_and_rate(
        self,
        *,
        order_id: int,
        customer_id: int,
        master_id: int,
        rating: int,
        comment: Optional[str],
        photos: Sequence[str],
    ) -> int:
        """Insert the review and refresh the master's rating and review count."""
        raise NotImplementedError

    def list_for_master(
        self, master_id: int, *, min_rating: Optional[int], sort: str, page: PageRequest
    ) -> Page[Review]:
        raise NotImplementedError

    def rating_breakdown(self, master_id: int) -> dict[int, int]:
        raise NotImplementedError

    def set_reply(self, review_id: int, *, reply: str, replied_at: datetime) -> bool:
        raise NotImplementedError
