from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import month_start, now_local, previous_month_start, shift_month
from ..common.pagination import PageRequest
from ..core.constants import ADMIN_ANALYTICS_MONTHS, ANALYTICS_PERIOD_DAYS, ANALYTICS_TOP_LIMIT, MONTH_LABELS
from ..core.exceptions import ValidationError
from ..orders.model import Order
from ..orders.repository import OrderRepository
from ..settings.service import SettingsService
from .export import to_xlsx
from .repository import AdminRepository

logger = logging.getLogger(__name__)

EXPORT_TYPES = frozenset({"orders", "users", "masters"})
EXPORT_FORMATS = frozenset({"json", "xlsx"})
RECENT_ORDERS_LIMIT = 5


def growth_percent(current: int, previous: int) -> float:
    if previous <= 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


class AdminService:
    """Dashboard numbers and data exports."""

    def __init__(self, admin: AdminRepository, orders: OrderRepository, settings: SettingsService):
        self._admin = admin
        self._orders = orders
        self._settings = settings

    def stats(self, *, now: Optional[datetime] = None) -> tuple[dict, Sequence[Order]]:
        now = now or now_local()
        counts = self._admin.platform_counts(
            month_start=month_start(now), previous_month_start=previous_month_start(now)
        )
        revenue = float(counts.get("totalRevenue") or 0)
        stats = {
            **counts,
            "totalRevenue": round(revenue, 2),
            "platformRevenue": round(revenue * self._settings.commission_rate(), 2),
            "orderGrowth": growth_percent(counts.get("thisMonthOrders", 0), counts.get("lastMonthOrders", 0)),
        }
        recent = self._orders.list_admin(status=None, search=None, page=PageRequest(1, RECENT_ORDERS_LIMIT)).items
        return stats, recent

    def analytics(self, *, now: Optional[datetime] = None) -> dict:
        """Rolling 30-day comparison, leaders and a 12-month series."""
        now = now or now_local()
        since = now - timedelta(days=ANALYTICS_PERIOD_DAYS)
        previous_since = since - timedelta(days=ANALYTICS_PERIOD_DAYS)
        current = self._admin.period_counts(start=since, end=now + timedelta(seconds=1))
        previous = self._admin.period_counts(start=previous_since, end=since)
        totals = self._admin.totals()

        def change(key: str, *, current_value=None, previous_value=None) -> dict:
            return {
                "current": current[key] if current_value is None else current_value,
                "previous": previous[key] if previous_value is None else previous_value,
                "change": growth_percent(current[key], previous[key]),
            }

        # users and masters report platform size; the change still compares the two windows
        stats = {
            "revenue": change("revenue"),
            "orders": change("orders"),
            "users": change(
                "users", current_value=totals["users"], previous_value=totals["users"] - current["users"]
            ),
            "masters": change(
                "masters", current_value=totals["masters"], previous_value=totals["masters"] - current["masters"]
            ),
        }

        top_services = [
            {
                "name": c["name"],
                "orders": c["orders"],
                "revenue": c["revenue"],
                "growth": growth_percent(c["recentOrders"], c["previousOrders"]),
            }
            for c in self._admin.top_categories(ANALYTICS_TOP_LIMIT, since=since, previous_since=previous_since)
        ]

        this_month = month_start(now)
        monthly = []
        for back in range(ADMIN_ANALYTICS_MONTHS - 1, -1, -1):
            start = shift_month(this_month, -back)
            counts = self._admin.period_counts(start=start, end=shift_month(start, 1))
            monthly.append(
                {
                    "month": MONTH_LABELS[start.month - 1],
                    "period": f"{start:%Y-%m}",
                    "orders": counts["orders"],
                    "revenue": counts["revenue"],
                }
            )

        return {
            "stats": stats,
            "topMasters": list(self._admin.top_masters(ANALYTICS_TOP_LIMIT)),
            "topServices": top_services,
            "monthlyData": monthly,
        }

    def export(self, *, kind: Optional[str], fmt: Optional[str]) -> tuple[str, object]:
        """Returns ("json", rows) or ("xlsx", BytesIO)."""
        kind = (kind or "orders").lower()
        fmt = (fmt or "json").lower()
        if kind not in EXPORT_TYPES:
            raise ValidationError("Yanlış ixrac növü")
        if fmt not in EXPORT_FORMATS:
            raise ValidationError("Yanlış format")

        rows = list(self._admin.export_rows(kind))
        logger.info("Export %s as %s: %d rows", kind, fmt, len(rows))
        if fmt == "xlsx":
            return fmt, to_xlsx(rows, kind=kind)
        return fmt, rows
