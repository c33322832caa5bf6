from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ApplicationStatus
from .model import JobApplication


class ApplicationRepository(Protocol):
    def get(self, application_id: int) -> Optional[JobApplication]:
        raise NotImplementedError

    def find(self, *, order_id: int, master_id: int) -> Optional[JobApplication]:
        raise NotImplementedError

    def create(
        self,
        *,
        order_id: int,
        master_id: int,
        price: float,
        message: Optional[str],
        estimated_duration: Optional[str],
    ) -> int:
        raise NotImplementedError

    def list(self, *, order_id: Optional[int] = None, master_id: Optional[int] = None) -> Sequence[JobApplication]:
        raise NotImplementedError

    def accept(self, application_id: int, *, now: datetime) -> bool:
        """Accept one application, assign its master and reject the siblings in one transaction."""
        raise NotImplementedError

    def set_status(
        self,
        application_id: int,
        *,
        expected: ApplicationStatus,
        status: ApplicationStatus,
        now: datetime,
        rejected_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def delete(self, application_id: int) -> bool:
        raise NotImplementedError

    def count_for_master(self, master_id: int, *, status: ApplicationStatus) -> int:
        raise NotImplementedError
