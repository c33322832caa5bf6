from __future__ import annotations

import dataclasses

import pytest

from src.ustabul.ustabul.core.enums import SettingType
from src.ustabul.ustabul.core.exceptions import NotFoundError, ValidationError
from src.ustabul.ustabul.settings.model import SystemSetting
from src.ustabul.ustabul.settings.service import DEFAULT_SETTINGS, SettingsService


class InMemorySettings:
    def __init__(self):
        self.items: dict[str, SystemSetting] = {}

    def list_all(self):
        return sorted(self.items.values(), key=lambda s: (s.category, s.key))

    def get(self, key):
        return self.items.get(key)

    def upsert_many(self, items):
        for item in items:
            self.items[item.key] = item
        return list(items)

    def upsert(self, *, key, value, type, category):
        self.items[key] = SystemSetting(key=key, value=value, type=type, category=category)
        return self.items[key]


@pytest.fixture
def repo():
    return InMemorySettings()


@pytest.fixture
def service(repo):
    service = SettingsService(repo)
    service.ensure_defaults()
    return service


def test_defaults_seeded_once(service, repo):
    repo.items["site_name"] = dataclasses.replace(repo.items["site_name"], value="Custom")

    service.ensure_defaults()

    assert len(repo.items) == len(DEFAULT_SETTINGS)
    assert repo.items["site_name"].value == "Custom"


def test_default_commission_is_ten_percent(service):
    assert service.commission_rate() == pytest.approx(0.1)


def test_commission_follows_setting(service):
    service.update_one("platform_commission_percent", {"value": 12.5})

    assert service.commission_rate() == pytest.approx(0.125)


def test_number_setting_rejects_text(service):
    with pytest.raises(ValidationError):
        service.update_one("platform_commission_percent", {"value": "çox"})


def test_boolean_and_json_values_are_stringified(service):
    saved = service.update_many(
        [
            {"key": "maintenance_mode", "value": True},
            {"key": "districts", "value": ["Yasamal", "Nəsimi"], "type": "json", "category": "orders"},
        ]
    )

    assert saved[0].value == "true"
    assert saved[0].typed_value is True
    assert saved[1].type == SettingType.JSON
    assert saved[1].typed_value == ["Yasamal", "Nəsimi"]


def test_update_many_requires_list(service):
    with pytest.raises(ValidationError):
        service.update_many([])


def test_missing_value_rejected(service):
    with pytest.raises(ValidationError):
        service.update_one("site_name", {})


def test_grouped_by_category(service):
    groups = service.grouped()

    assert {s.key for s in groups["payments"]} == {"platform_commission_percent"}
    assert "site_name" in {s.key for s in groups["general"]}


def test_unknown_key(service):
    with pytest.raises(NotFoundError):
        service.get("nope")
