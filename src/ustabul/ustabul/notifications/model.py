from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    data: Optional[dict[str, Any]]
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime] = None
