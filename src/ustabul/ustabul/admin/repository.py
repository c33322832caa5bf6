from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence


class AdminRepository(Protocol):
    def platform_counts(self, *, month_start: datetime, previous_month_start: datetime) -> dict:
        """Counts and sums for the dashboard, keyed by the JSON field names."""
        raise NotImplementedError

    def totals(self) -> dict:
        """Platform-wide users, masters and orders."""
        raise NotImplementedError

    def period_counts(self, *, start: datetime, end: datetime) -> dict:
        """New users, masters and orders plus PAID revenue created in [start, end)."""
        raise NotImplementedError

    def top_masters(self, limit: int) -> Sequence[dict]:
        raise NotImplementedError

    def top_categories(self, limit: int, *, since: datetime, previous_since: datetime) -> Sequence[dict]:
        """Active categories by order count, with recent and previous window counts."""
        raise NotImplementedError

    def export_rows(self, kind: str) -> Sequence[dict]:
        raise NotImplementedError
