from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..applications.repository import ApplicationRepository
from ..common.datetime_utils import month_start, now_local, parse_iso_date, shift_month
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    normalize_phone,
    optional_float,
    optional_int,
    require_clock_time,
    require_non_empty,
)
from ..core.constants import (
    ADMIN_RECENT_REVIEWS_LIMIT,
    LEADERBOARD_LIMIT,
    MASTER_ANALYTICS_MONTHS,
    MONTH_LABELS,
    RECENT_REVIEWS_LIMIT,
)
from ..core.enums import ApplicationStatus, MasterBadge, PortfolioType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..orders.repository import OrderRepository
from ..reviews.model import Review
from ..reviews.repository import ReviewRepository
from ..settings.service import SettingsService
from ..users.model import SessionUser, User
from ..users.repository import UserRepository
from ..users.service import UserService
from .model import AvailabilitySlot, MasterProfile, NewPortfolioItem, PortfolioItem, ServiceOffering
from .repository import (
    AvailabilityRepository,
    FavoriteRepository,
    MasterActivityRepository,
    MasterRepository,
    PortfolioRepository,
)

logger = logging.getLogger(__name__)

SORT_OPTIONS = frozenset({"rating", "price", "experience", "reviews"})

# camelCase payload key -> repository field
PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "bio": "bio",
    "avatar": "avatar",
    "district": "district",
    "workingHoursStart": "working_hours_start",
    "workingHoursEnd": "working_hours_end",
}
PROFILE_KEYS = frozenset(PROFILE_FIELDS) | {"phone", "experience", "hourlyRate", "districts", "categoryIds"}
BADGE_KEYS = {
    "isVerified": MasterBadge.VERIFIED,
    "isPremium": MasterBadge.PREMIUM,
    "isInsured": MasterBadge.INSURED,
}


def profile_changes(changes: dict) -> dict:
    """Validate camelCase profile edits into repository field names."""
    fields: dict = {}
    for key, name in PROFILE_FIELDS.items():
        if key in changes:
            value = changes.get(key)
            fields[name] = str(value).strip() if value not in (None, "") else None
    if "firstName" in changes:
        fields["first_name"] = require_non_empty(changes.get("firstName"), "Ad")
    if "lastName" in changes:
        fields["last_name"] = fields["last_name"] or ""
    if "phone" in changes:
        fields["phone"] = normalize_phone(changes.get("phone"))
    if "experience" in changes:
        experience = optional_int(changes.get("experience"), "Təcrübə") or 0
        if experience < 0:
            raise ValidationError("Təcrübə mənfi ola bilməz")
        fields["experience"] = experience
    if "hourlyRate" in changes:
        rate = optional_float(changes.get("hourlyRate"), "Saatlıq qiymət")
        if rate is not None and rate < 0:
            raise ValidationError("Saatlıq qiymət mənfi ola bilməz")
        fields["hourly_rate"] = rate
    if "districts" in changes:
        districts = changes.get("districts") or []
        if not isinstance(districts, list):
            raise ValidationError("Rayonlar siyahı olmalıdır")
        fields["districts"] = [str(d).strip() for d in districts if str(d).strip()]
    if "categoryIds" in changes:
        ids = changes.get("categoryIds") or []
        if not isinstance(ids, list):
            raise ValidationError("Kateqoriyalar siyahı olmalıdır")
        fields["category_ids"] = [optional_int(i, "Kateqoriya") for i in ids if i not in (None, "")]
    return fields


class MasterDirectoryService:
    """Public side: search, detail page and leaderboard."""

    def __init__(self, masters: MasterRepository, reviews: ReviewRepository):
        self._masters = masters
        self._reviews = reviews

    def search(
        self,
        *,
        category: Optional[str] = None,
        district: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
        page: PageRequest,
    ) -> Page[MasterProfile]:
        sort = (sort or "rating").lower()
        return self._masters.search(
            category_slug=(category or "").strip() or None,
            district=(district or "").strip() or None,
            text=(search or "").strip() or None,
            sort=sort if sort in SORT_OPTIONS else "rating",
            page=page,
        )

    def detail(self, master_id: int) -> tuple[MasterProfile, Sequence[ServiceOffering], Sequence[Review]]:
        master = self._masters.get_by_id(master_id)
        if not master or not master.is_active:
            raise NotFoundError("Usta tapılmadı")
        services = self._masters.list_services(master_id, active_only=True)
        reviews = self._reviews.list_for_master(
            master_id, min_rating=None, sort="newest", page=PageRequest(1, RECENT_REVIEWS_LIMIT)
        ).items
        return master, services, reviews

    def leaderboard(self, *, limit=None, category_id=None) -> list[tuple[int, MasterProfile]]:
        limit = optional_int(limit, "Limit") or LEADERBOARD_LIMIT
        limit = max(1, min(limit, 100))
        masters = self._masters.leaderboard(limit=limit, category_id=optional_int(category_id, "Kateqoriya"))
        return list(enumerate(masters, start=1))


class MasterPanelService:
    """The master's own dashboard: profile, services and stats."""

    def __init__(
        self,
        masters: MasterRepository,
        orders: OrderRepository,
        applications: ApplicationRepository,
        settings: SettingsService,
        activity: MasterActivityRepository,
    ):
        self._masters = masters
        self._orders = orders
        self._applications = applications
        self._settings = settings
        self._activity = activity

    def _master_id(self, actor: SessionUser) -> int:
        if actor.master_id is None:
            raise NotFoundError("Usta profili tapılmadı")
        return actor.master_id

    def profile(self, actor: SessionUser) -> MasterProfile:
        master = self._masters.get_by_id(self._master_id(actor))
        if not master:
            raise NotFoundError("Usta profili tapılmadı")
        return master

    def update_profile(self, actor: SessionUser, changes: dict) -> MasterProfile:
        master_id = self._master_id(actor)
        fields = profile_changes(changes)
        master = self._masters.update_profile(master_id, **fields)
        logger.info("Master %s updated profile fields %s", master_id, sorted(fields))
        return master

    def list_services(self, actor: SessionUser) -> Sequence[ServiceOffering]:
        return self._masters.list_services(self._master_id(actor))

    def _own_service(self, actor: SessionUser, service_id) -> ServiceOffering:
        service_id = optional_int(service_id, "Xidmət")
        if not service_id:
            raise ValidationError("Xidmət ID tələb olunur")
        service = self._masters.get_service(service_id)
        if not service:
            raise NotFoundError("Xidmət tapılmadı")
        if service.master_id != self._master_id(actor):
            raise AuthorizationError("Bu xidmət sizə aid deyil")
        return service

    def create_service(self, actor: SessionUser, payload: dict) -> ServiceOffering:
        master_id = self._master_id(actor)
        name = require_non_empty(payload.get("name"), "Xidmətin adı")
        price = optional_float(payload.get("price"), "Qiymət")
        if price is None or price <= 0:
            raise ValidationError("Qiymət müsbət olmalıdır")

        service_id = self._masters.create_service(
            master_id=master_id,
            name=name,
            price=price,
            category_id=optional_int(payload.get("categoryId"), "Kateqoriya"),
            description=(payload.get("description") or "").strip() or None,
            duration=optional_int(payload.get("duration"), "Müddət"),
        )
        return self._masters.get_service(service_id)

    def update_service(self, actor: SessionUser, payload: dict) -> ServiceOffering:
        service = self._own_service(actor, payload.get("id"))
        fields: dict = {}
        if "name" in payload:
            fields["name"] = require_non_empty(payload.get("name"), "Xidmətin adı")
        if "price" in payload:
            price = optional_float(payload.get("price"), "Qiymət")
            if price is None or price <= 0:
                raise ValidationError("Qiymət müsbət olmalıdır")
            fields["price"] = price
        if "description" in payload:
            fields["description"] = (payload.get("description") or "").strip() or None
        if "duration" in payload:
            fields["duration"] = optional_int(payload.get("duration"), "Müddət")
        if "categoryId" in payload:
            fields["category_id"] = optional_int(payload.get("categoryId"), "Kateqoriya")
        if "isActive" in payload:
            fields["is_active"] = bool(payload.get("isActive"))
        return self._masters.update_service(service.service_id, **fields)

    def delete_service(self, actor: SessionUser, service_id) -> None:
        service = self._own_service(actor, service_id)
        self._masters.delete_service(service.service_id)

    def stats(self, actor: SessionUser, *, now=None) -> dict:
        master = self.profile(actor)
        counts = self._orders.master_stats(master.master_id, month_start=month_start(now or now_local()))
        commission = self._settings.commission_rate()
        revenue = float(counts.get("totalRevenue") or 0)
        month_revenue = float(counts.get("thisMonthRevenue") or 0)

        return {
            **counts,
            "totalRevenue": round(revenue, 2),
            "thisMonthRevenue": round(month_revenue, 2),
            "netEarnings": round(revenue * (1 - commission), 2),
            "thisMonthNetEarnings": round(month_revenue * (1 - commission), 2),
            "commissionPercent": round(commission * 100, 2),
            "rating": master.rating,
            "reviewCount": master.review_count,
            "completedJobs": master.completed_jobs,
            "pendingApplications": self._applications.count_for_master(
                master.master_id, status=ApplicationStatus.PENDING
            ),
        }

    def analytics(self, actor: SessionUser, *, now: Optional[datetime] = None) -> dict:
        master = self.profile(actor)
        current = month_start(now or now_local())

        monthly = []
        for back in range(MASTER_ANALYTICS_MONTHS - 1, -1, -1):
            start = shift_month(current, -back)
            orders, revenue = self._activity.period_totals(master.master_id, start=start, end=shift_month(start, 1))
            monthly.append(
                {
                    "month": MONTH_LABELS[start.month - 1],
                    "period": f"{start:%Y-%m}",
                    "orders": orders,
                    "revenue": revenue,
                }
            )
        return {
            "monthlyData": monthly,
            "rating": master.rating,
            "reviewCount": master.review_count,
            "completedJobs": master.completed_jobs,
        }


class PortfolioService:
    def __init__(self, portfolio: PortfolioRepository):
        self._portfolio = portfolio

    def list(self, actor: SessionUser) -> Sequence[PortfolioItem]:
        if actor.master_id is None:
            return []
        return self._portfolio.list_for_master(actor.master_id)

    def add(self, actor: SessionUser, payload: dict) -> PortfolioItem:
        if actor.master_id is None:
            raise NotFoundError("Usta tapılmadı")

        try:
            item_type = PortfolioType(str(payload.get("type") or PortfolioType.IMAGE.value).upper())
        except ValueError:
            raise ValidationError("Portfolio növü yanlışdır")
        images = payload.get("images") or []
        if not isinstance(images, list):
            raise ValidationError("Şəkillər siyahı olmalıdır")
        price = optional_float(payload.get("price"), "Qiymət")
        if price is not None and price < 0:
            raise ValidationError("Qiymət mənfi ola bilməz")

        def text(key: str) -> Optional[str]:
            return str(payload.get(key) or "").strip() or None

        item = self._portfolio.create(
            actor.master_id,
            NewPortfolioItem(
                title=require_non_empty(payload.get("title"), "Başlıq"),
                url=require_non_empty(payload.get("url"), "Fayl ünvanı"),
                type=item_type,
                description=text("description"),
                thumbnail=text("thumbnail"),
                before_image=text("beforeImage"),
                after_image=text("afterImage"),
                images=tuple(str(i) for i in images),
                category=text("category"),
                duration=text("duration"),
                price=price,
            ),
        )
        logger.info("Master %s added portfolio item %s", actor.master_id, item.item_id)
        return item


def parse_slot(payload) -> AvailabilitySlot:
    if not isinstance(payload, dict):
        raise ValidationError("Slot məlumatı yanlışdır")
    start = require_clock_time(payload.get("startTime"), "Başlama vaxtı")
    end = require_clock_time(payload.get("endTime"), "Bitmə vaxtı")
    if start >= end:
        raise ValidationError("Başlama vaxtı bitmə vaxtından əvvəl olmalıdır")
    is_available = payload.get("isAvailable")
    return AvailabilitySlot(
        date=parse_iso_date(str(payload.get("date") or "")[:10]),
        start_time=start,
        end_time=end,
        is_available=True if is_available is None else bool(is_available),
    )


class AvailabilityService:
    def __init__(self, availability: AvailabilityRepository):
        self._availability = availability

    def _master_id(self, actor: SessionUser) -> int:
        if actor.master_id is None:
            raise NotFoundError("Usta tapılmadı")
        return actor.master_id

    def list(self, actor: SessionUser) -> Sequence[AvailabilitySlot]:
        if actor.master_id is None:
            return []
        return self._availability.list_for_master(actor.master_id)

    def add(self, actor: SessionUser, payload: dict) -> AvailabilitySlot:
        return self._availability.add(self._master_id(actor), parse_slot(payload))

    def replace(self, actor: SessionUser, slots) -> Sequence[AvailabilitySlot]:
        master_id = self._master_id(actor)
        if not isinstance(slots, list):
            raise ValidationError("Slotlar siyahı olmalıdır")
        parsed = [parse_slot(s) for s in slots]
        logger.info("Master %s replaced availability with %d slots", master_id, len(parsed))
        return self._availability.replace_all(master_id, parsed)


class FavoriteService:
    def __init__(self, favorites: FavoriteRepository, masters: MasterRepository, users: UserRepository):
        self._favorites = favorites
        self._masters = masters
        self._users = users

    def list(self, actor: SessionUser) -> Sequence[MasterProfile]:
        if actor.customer_id is None:
            return []
        return self._favorites.list_masters(actor.customer_id)

    def add(self, actor: SessionUser, master_id) -> None:
        master_id = optional_int(master_id, "Usta")
        if not master_id:
            raise ValidationError("Usta ID tələb olunur")
        if not self._masters.get_by_id(master_id):
            raise NotFoundError("Usta tapılmadı")

        customer = self._users.ensure_customer_profile(actor.user_id)
        if self._favorites.exists(customer_id=customer.customer_id, master_id=master_id):
            raise ValidationError("Usta artıq seçilmişlərdədir")
        self._favorites.add(customer_id=customer.customer_id, master_id=master_id)

    def remove(self, actor: SessionUser, master_id) -> None:
        master_id = optional_int(master_id, "Usta")
        if not master_id:
            raise ValidationError("Usta ID tələb olunur")
        if actor.customer_id is None or not self._favorites.remove(customer_id=actor.customer_id, master_id=master_id):
            raise NotFoundError("Seçilmiş usta tapılmadı")


class MasterAdminService:
    """Admin moderation of master profiles."""

    def __init__(
        self,
        masters: MasterRepository,
        reviews: ReviewRepository,
        users: UserRepository,
        user_service: UserService,
    ):
        self._masters = masters
        self._reviews = reviews
        self._users = users
        self._user_service = user_service

    def _get(self, master_id: int) -> MasterProfile:
        master = self._masters.get_by_id(master_id)
        if not master:
            raise NotFoundError("Usta tapılmadı")
        return master

    def detail(
        self, master_id: int
    ) -> tuple[MasterProfile, Optional[User], Sequence[ServiceOffering], Sequence[Review]]:
        """Includes inactive masters, all services and the latest reviews."""
        master = self._get(master_id)
        reviews = self._reviews.list_for_master(
            master_id, min_rating=None, sort="newest", page=PageRequest(1, ADMIN_RECENT_REVIEWS_LIMIT)
        ).items
        return master, self._users.get_by_id(master.user_id), self._masters.list_services(master_id), reviews

    def update(self, master_id: int, changes: dict) -> MasterProfile:
        master = self._get(master_id)
        known = PROFILE_KEYS | set(BADGE_KEYS) | {"isActive"}
        if not any(key in known for key in changes):
            raise ValidationError("Dəyişdiriləcək sahə göstərilməyib")

        fields = profile_changes({k: v for k, v in changes.items() if k in PROFILE_KEYS})
        if fields:
            self._masters.update_profile(master.master_id, **fields)
        for key, badge in BADGE_KEYS.items():
            if key in changes:
                self._masters.set_badge(master.master_id, badge=badge, value=bool(changes[key]))
        if "isActive" in changes:
            self._masters.set_active(master.master_id, is_active=bool(changes["isActive"]))

        logger.info("Admin updated master %s: %s", master.master_id, sorted(k for k in changes if k in known))
        return self._get(master.master_id)

    def delete(self, master_id: int) -> None:
        master = self._get(master_id)
        # the account goes with the profile; users with orders are refused there
        self._user_service.delete_user(current_role=Role.ADMIN, user_id=master.user_id)
        logger.info("Master %s deleted with user %s", master.master_id, master.user_id)

    def list(self, *, search: Optional[str], page: PageRequest) -> Page[MasterProfile]:
        return self._masters.search(
            category_slug=None,
            district=None,
            text=(search or "").strip() or None,
            sort="rating",
            page=page,
            include_inactive=True,
        )

    def set_badge(self, master_id: int, *, badge: Optional[str], action: Optional[str]) -> MasterProfile:
        try:
            badge_enum = MasterBadge((badge or "").lower())
        except ValueError:
            raise ValidationError("Nişan yanlışdır")
        action = (action or "add").lower()
        if action not in ("add", "remove"):
            raise ValidationError("Yanlış əməliyyat")

        if not self._masters.set_badge(master_id, badge=badge_enum, value=action == "add"):
            raise NotFoundError("Usta tapılmadı")
        logger.info("Master %s badge %s: %s", master_id, badge_enum.value, action)
        return self._masters.get_by_id(master_id)

    def set_blocked(self, master_id: int, *, blocked: bool) -> None:
        if not self._masters.set_active(master_id, is_active=not blocked):
            raise NotFoundError("Usta tapılmadı")
        logger.info("Master %s %s", master_id, "blocked" if blocked else "unblocked")
