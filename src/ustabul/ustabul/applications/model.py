from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ApplicationStatus


@dataclass(frozen=True)
class JobApplication:
    """A master's offer (price + message) for an open order."""

    application_id: int
    order_id: int
    master_id: int
    master_user_id: int
    price: float
    status: ApplicationStatus
    created_at: datetime
    message: Optional[str] = None
    estimated_duration: Optional[str] = None
    rejected_reason: Optional[str] = None
    accepted_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    master_name: Optional[str] = None
    master_rating: float = 0.0
