from __future__ import annotations

import dataclasses
from datetime import date, datetime

import pytest

from src.ustabul.ustabul.common.datetime_utils import shift_month
from src.ustabul.ustabul.core.enums import PortfolioType, Role
from src.ustabul.ustabul.core.exceptions import NotFoundError, ValidationError
from src.ustabul.ustabul.masters.model import AvailabilitySlot, MasterProfile, PortfolioItem
from src.ustabul.ustabul.masters.service import (
    AvailabilityService,
    MasterPanelService,
    PortfolioService,
    parse_slot,
)
from src.ustabul.ustabul.users.model import SessionUser


class InMemoryPortfolio:
    def __init__(self):
        self.items: list[PortfolioItem] = []

    def list_for_master(self, master_id: int):
        return [i for i in self.items if i.master_id == master_id]

    def create(self, master_id: int, item) -> PortfolioItem:
        stored = PortfolioItem(item_id=len(self.items) + 1, master_id=master_id, **dataclasses.asdict(item))
        self.items.append(stored)
        return stored


class InMemoryAvailability:
    def __init__(self):
        self.slots: dict[int, list[AvailabilitySlot]] = {}

    def list_for_master(self, master_id: int):
        return sorted(self.slots.get(master_id, []), key=lambda s: (s.date, s.start_time))

    def add(self, master_id: int, slot: AvailabilitySlot) -> AvailabilitySlot:
        self.slots.setdefault(master_id, []).append(slot)
        return slot

    def replace_all(self, master_id: int, slots):
        self.slots[master_id] = list(slots)
        return self.list_for_master(master_id)


class FakeActivity:
    def __init__(self, totals: dict[str, tuple[int, float]]):
        self.totals = totals
        self.windows: list[tuple[datetime, datetime]] = []

    def period_totals(self, master_id: int, *, start: datetime, end: datetime):
        self.windows.append((start, end))
        return self.totals.get(f"{start:%Y-%m}", (0, 0.0))


class OneMaster:
    def __init__(self, master: MasterProfile):
        self.master = master

    def get_by_id(self, master_id: int):
        return self.master if master_id == self.master.master_id else None


@pytest.fixture
def customer_only() -> SessionUser:
    return SessionUser(
        user_id=3, email="anar@mail.az", full_name="Anar Məmmədov", role=Role.CUSTOMER,
        email_verified=True, customer_id=30,
    )


@pytest.mark.parametrize(
    "moment, months, expected",
    [
        (datetime(2025, 3, 17, 12, 30), 0, datetime(2025, 3, 1)),
        (datetime(2025, 3, 17), -2, datetime(2025, 1, 1)),
        (datetime(2025, 3, 17), -3, datetime(2024, 12, 1)),
        (datetime(2025, 1, 31), -13, datetime(2023, 12, 1)),
        (datetime(2025, 12, 5), 1, datetime(2026, 1, 1)),
    ],
)
def test_shift_month(moment, months, expected):
    assert shift_month(moment, months) == expected


def test_parse_slot_defaults_to_available_and_trims_timestamp():
    slot = parse_slot({"date": "2030-03-12T08:00:00.000Z", "startTime": "09:00", "endTime": "17:30"})

    assert slot.date == date(2030, 3, 12)
    assert (slot.start_time, slot.end_time) == ("09:00", "17:30")
    assert slot.is_available is True


@pytest.mark.parametrize(
    "payload",
    [
        None,
        ["2030-03-12"],
        {"date": "2030-03-12", "startTime": "24:00", "endTime": "25:00"},
        {"date": "2030-03-12", "startTime": "10:00", "endTime": "10:00"},
        {"date": "", "startTime": "09:00", "endTime": "10:00"},
    ],
)
def test_parse_slot_rejects(payload):
    with pytest.raises(ValidationError):
        parse_slot(payload)


def test_portfolio_needs_master_profile(master, customer_only):
    service = PortfolioService(InMemoryPortfolio())

    assert service.list(customer_only) == []
    with pytest.raises(NotFoundError):
        service.add(customer_only, {"title": "İş", "url": "/a.jpg"})

    item = service.add(master, {"title": "  İş  ", "url": "/a.jpg", "images": ["/b.jpg"]})
    assert item.title == "İş"
    assert item.type is PortfolioType.IMAGE
    assert item.images == ("/b.jpg",)
    assert service.list(master) == [item]


@pytest.mark.parametrize(
    "payload",
    [
        {"url": "/a.jpg"},
        {"title": "İş"},
        {"title": "İş", "url": "/a.jpg", "type": "AUDIO"},
        {"title": "İş", "url": "/a.jpg", "images": "/b.jpg"},
        {"title": "İş", "url": "/a.jpg", "price": -5},
    ],
)
def test_portfolio_validation(master, payload):
    with pytest.raises(ValidationError):
        PortfolioService(InMemoryPortfolio()).add(master, payload)


def test_availability_replace_requires_list(master, customer_only):
    service = AvailabilityService(InMemoryAvailability())

    assert service.list(customer_only) == []
    with pytest.raises(ValidationError):
        service.replace(master, {"date": "2030-03-12"})
    with pytest.raises(NotFoundError):
        service.replace(customer_only, [])

    service.add(master, {"date": "2030-03-14", "startTime": "10:00", "endTime": "11:00"})
    slots = service.replace(master, [{"date": "2030-03-13", "startTime": "08:00", "endTime": "09:00"}])
    assert [s.date for s in slots] == [date(2030, 3, 13)]


def test_master_analytics_walks_back_six_months(master):
    profile = MasterProfile(
        master_id=master.master_id,
        user_id=master.user_id,
        first_name="Elvin",
        last_name="Həsənov",
        rating=4.5,
        review_count=2,
        completed_jobs=7,
    )
    activity = FakeActivity({"2024-12": (2, 80.0), "2025-03": (1, 30.0)})
    panel = MasterPanelService(OneMaster(profile), None, None, None, activity)

    data = panel.analytics(master, now=datetime(2025, 3, 17, 10, 0))

    assert [m["period"] for m in data["monthlyData"]] == [
        "2024-10", "2024-11", "2024-12", "2025-01", "2025-02", "2025-03",
    ]
    assert [m["month"] for m in data["monthlyData"]][:3] == ["Okt", "Noy", "Dek"]
    assert data["monthlyData"][2] == {"month": "Dek", "period": "2024-12", "orders": 2, "revenue": 80.0}
    assert activity.windows[-1] == (datetime(2025, 3, 1), datetime(2025, 4, 1))
    assert (data["rating"], data["reviewCount"], data["completedJobs"]) == (4.5, 2, 7)
