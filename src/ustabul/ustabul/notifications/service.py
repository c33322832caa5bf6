from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import NOTIFICATIONS_LIMIT
from ..core.enums import NotificationType
from ..core.exceptions import NotFoundError
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    """In-app notifications; other services call `notify` after state changes."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(
        self,
        *,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> int:
        notification_id = self._notifications.create(
            user_id=int(user_id), type=type, title=title, message=message, data=data
        )
        logger.debug("Notification %s (%s) for user %s", notification_id, type.value, user_id)
        return notification_id

    def list_recent(self, user_id: int) -> tuple[Sequence[Notification], int]:
        items = self._notifications.list_for_user(user_id, limit=NOTIFICATIONS_LIMIT)
        return items, self._notifications.count_unread(user_id)

    def _own(self, user_id: int, notification_id: int) -> Notification:
        item = self._notifications.get(notification_id)
        if not item or item.user_id != int(user_id):
            raise NotFoundError("Bildiriş tapılmadı")
        return item

    def mark_read(self, user_id: int, notification_id: int, *, now: Optional[datetime] = None) -> None:
        self._own(user_id, notification_id)
        self._notifications.mark_read(notification_id, read_at=now or now_local())

    def mark_all_read(self, user_id: int, *, now: Optional[datetime] = None) -> int:
        return self._notifications.mark_all_read(user_id, read_at=now or now_local())

    def delete(self, user_id: int, notification_id: int) -> None:
        self._own(user_id, notification_id)
        self._notifications.delete(notification_id)

    def delete_all(self, user_id: int) -> int:
        return self._notifications.delete_all(user_id)
