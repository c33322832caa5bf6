from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from sqlalchemy import delete, func, select, update

from ..core.enums import NotificationType
from ..database.base import transaction
from ..database.schema import NotificationRow
from ..extensions import db
from .model import Notification
from .repository import NotificationRepository


def _to_notification(row: NotificationRow) -> Notification:
    return Notification(
        notification_id=int(row.id),
        user_id=int(row.user_id),
        type=NotificationType(row.type),
        title=row.title,
        message=row.message,
        data=row.data,
        is_read=bool(row.is_read),
        created_at=row.created_at,
        read_at=row.read_at,
    )


class SQLAlchemyNotificationRepository(NotificationRepository):
    def create(
        self,
        *,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> int:
        with transaction() as session:
            row = NotificationRow(user_id=int(user_id), type=type.value, title=title, message=message, data=data)
            session.add(row)
            session.flush()
            return int(row.id)

    def get(self, notification_id: int) -> Optional[Notification]:
        row = db.session.get(NotificationRow, int(notification_id))
        return _to_notification(row) if row else None

    def list_for_user(self, user_id: int, *, limit: int) -> Sequence[Notification]:
        rows = db.session.execute(
            select(NotificationRow)
            .where(NotificationRow.user_id == int(user_id))
            .order_by(NotificationRow.created_at.desc(), NotificationRow.id.desc())
            .limit(limit)
        ).scalars()
        return [_to_notification(r) for r in rows]

    def count_unread(self, user_id: int) -> int:
        return int(
            db.session.execute(
                select(func.count(NotificationRow.id)).where(
                    NotificationRow.user_id == int(user_id), NotificationRow.is_read.is_(False)
                )
            ).scalar_one()
        )

    def mark_read(self, notification_id: int, *, read_at: datetime) -> bool:
        with transaction() as session:
            row = session.get(NotificationRow, int(notification_id))
            if not row:
                return False
            row.is_read = True
            row.read_at = read_at
            return True

    def mark_all_read(self, user_id: int, *, read_at: datetime) -> int:
        with transaction() as session:
            result = session.execute(
                update(NotificationRow)
                .where(NotificationRow.user_id == int(user_id), NotificationRow.is_read.is_(False))
                .values(is_read=True, read_at=read_at)
            )
            return int(result.rowcount or 0)

    def delete(self, notification_id: int) -> bool:
        with transaction() as session:
            row = session.get(NotificationRow, int(notification_id))
            if not row:
                return False
            session.delete(row)
            return True

    def delete_all(self, user_id: int) -> int:
        with transaction() as session:
            result = session.execute(delete(NotificationRow).where(NotificationRow.user_id == int(user_id)))
            return int(result.rowcount or 0)
