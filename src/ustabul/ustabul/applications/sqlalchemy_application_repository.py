from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select, update

from ..core.enums import ApplicationStatus, OrderStatus
from ..database.base import transaction
from ..database.schema import JobApplicationRow, OrderRow
from ..extensions import db
from .model import JobApplication
from .repository import ApplicationRepository

SIBLING_REJECT_REASON = "Başqa usta seçildi"


def _to_application(row: JobApplicationRow) -> JobApplication:
    master = row.master
    return JobApplication(
        application_id=int(row.id),
        order_id=int(row.order_id),
        master_id=int(row.master_id),
        master_user_id=int(master.user_id),
        price=float(row.price),
        status=ApplicationStatus(row.status),
        created_at=row.created_at,
        message=row.message,
        estimated_duration=row.estimated_duration,
        rejected_reason=row.rejected_reason,
        accepted_at=row.accepted_at,
        rejected_at=row.rejected_at,
        master_name=f"{master.first_name} {master.last_name}".strip(),
        master_rating=float(master.rating or 0),
    )


class SQLAlchemyApplicationRepository(ApplicationRepository):
    def get(self, application_id: int) -> Optional[JobApplication]:
        row = db.session.get(JobApplicationRow, int(application_id))
        return _to_application(row) if row else None

    def find(self, *, order_id: int, master_id: int) -> Optional[JobApplication]:
        row = db.session.execute(
            select(JobApplicationRow).where(
                JobApplicationRow.order_id == int(order_id), JobApplicationRow.master_id == int(master_id)
            )
        ).scalar_one_or_none()
        return _to_application(row) if row else None

    def create(
        self,
        *,
        order_id: int,
        master_id: int,
        price: float,
        message: Optional[str],
        estimated_duration: Optional[str],
    ) -> int:
        with transaction() as session:
            row = JobApplicationRow(
                order_id=int(order_id),
                master_id=int(master_id),
                price=float(price),
                message=message,
                estimated_duration=estimated_duration,
                status=ApplicationStatus.PENDING.value,
            )
            session.add(row)
            session.flush()
            return int(row.id)

    def list(self, *, order_id: Optional[int] = None, master_id: Optional[int] = None) -> Sequence[JobApplication]:
        query = select(JobApplicationRow)
        if order_id is not None:
            query = query.where(JobApplicationRow.order_id == int(order_id))
        if master_id is not None:
            query = query.where(JobApplicationRow.master_id == int(master_id))
        rows = db.session.execute(
            query.order_by(JobApplicationRow.created_at.desc(), JobApplicationRow.id.desc())
        ).scalars()
        return [_to_application(r) for r in rows]

    def accept(self, application_id: int, *, now: datetime) -> bool:
        with transaction() as session:
            app_row = session.get(JobApplicationRow, int(application_id))
            if not app_row or app_row.status != ApplicationStatus.PENDING.value:
                return False

            assigned = session.execute(
                update(OrderRow)
                .where(
                    OrderRow.id == app_row.order_id,
                    OrderRow.status == OrderStatus.PENDING.value,
                    OrderRow.master_id.is_(None),
                )
                .values(master_id=app_row.master_id, status=OrderStatus.ACCEPTED.value, accepted_at=now)
                .execution_options(synchronize_session=False)
            )
            if assigned.rowcount != 1:
                session.rollback()
                return False

            app_row.status = ApplicationStatus.ACCEPTED.value
            app_row.accepted_at = now
            session.execute(
                update(JobApplicationRow)
                .where(
                    JobApplicationRow.order_id == app_row.order_id,
                    JobApplicationRow.id != app_row.id,
                    JobApplicationRow.status == ApplicationStatus.PENDING.value,
                )
                .values(
                    status=ApplicationStatus.REJECTED.value, rejected_at=now, rejected_reason=SIBLING_REJECT_REASON
                )
                .execution_options(synchronize_session=False)
            )
            return True

    def set_status(
        self,
        application_id: int,
        *,
        expected: ApplicationStatus,
        status: ApplicationStatus,
        now: datetime,
        rejected_reason: Optional[str] = None,
    ) -> bool:
        values: dict = {"status": status.value}
        if status == ApplicationStatus.REJECTED:
            values.update(rejected_at=now, rejected_reason=rejected_reason)
        with transaction() as session:
            result = session.execute(
                update(JobApplicationRow)
                .where(JobApplicationRow.id == int(application_id), JobApplicationRow.status == expected.value)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def delete(self, application_id: int) -> bool:
        with transaction() as session:
            row = session.get(JobApplicationRow, int(application_id))
            if not row:
                return False
            session.delete(row)
            return True

    def count_for_master(self, master_id: int, *, status: ApplicationStatus) -> int:
        return int(
            db.session.execute(
                select(func.count(JobApplicationRow.id)).where(
                    JobApplicationRow.master_id == int(master_id), JobApplicationRow.status == status.value
                )
            ).scalar_one()
        )
