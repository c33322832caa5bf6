from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Review:
    review_id: int
    order_id: int
    customer_id: int
    master_id: int
    rating: int
    created_at: datetime
    comment: Optional[str] = None
    photos: tuple[str, ...] = ()
    reply: Optional[str] = None
    replied_at: Optional[datetime] = None
    helpful_count: int = 0
    is_approved: bool = True
    is_hidden: bool = False
    customer_name: Optional[str] = None
    customer_avatar: Optional[str] = None
