from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from ..core.constants import COMMISSION_SETTING_KEY, DEFAULT_COMMISSION_PERCENT
from ..core.enums import SettingType
from ..core.exceptions import NotFoundError, ValidationError
from .model import SystemSetting
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = (
    SystemSetting(COMMISSION_SETTING_KEY, str(int(DEFAULT_COMMISSION_PERCENT)), SettingType.NUMBER, "payments"),
    SystemSetting("site_name", "UstaBul", SettingType.STRING, "general"),
    SystemSetting("support_email", "support@ustabul.az", SettingType.STRING, "general"),
    SystemSetting("support_phone", "+994501234567", SettingType.STRING, "general"),
    SystemSetting("min_order_amount", "10", SettingType.NUMBER, "orders"),
    SystemSetting("maintenance_mode", "false", SettingType.BOOLEAN, "general"),
)


def _stringify(value: Any, setting_type: SettingType) -> str:
    if setting_type == SettingType.JSON and not isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if setting_type == SettingType.BOOLEAN and isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def list_all(self) -> Sequence[SystemSetting]:
        return self._settings.list_all()

    def grouped(self) -> dict[str, list[SystemSetting]]:
        groups: dict[str, list[SystemSetting]] = {}
        for item in self._settings.list_all():
            groups.setdefault(item.category, []).append(item)
        return groups

    def get(self, key: str) -> SystemSetting:
        item = self._settings.get(key)
        if not item:
            raise NotFoundError("Tənzimləmə tapılmadı")
        return item

    def _parse(self, raw: dict, *, key: Optional[str] = None) -> SystemSetting:
        key = (key or raw.get("key") or "").strip()
        if not key:
            raise ValidationError("Açar tələb olunur")
        if "value" not in raw or raw.get("value") is None:
            raise ValidationError("Dəyər tələb olunur")

        existing = self._settings.get(key)
        try:
            setting_type = SettingType(raw.get("type") or (existing.type.value if existing else "string"))
        except ValueError:
            raise ValidationError("Tənzimləmə tipi yanlışdır")
        category = raw.get("category") or (existing.category if existing else "general")

        item = SystemSetting(key=key, value=_stringify(raw["value"], setting_type), type=setting_type, category=category)
        if setting_type in (SettingType.NUMBER, SettingType.JSON) and item.typed_value is None:
            raise ValidationError(f"{key} üçün dəyər yanlışdır")
        return item

    def update_many(self, items: Sequence[dict]) -> Sequence[SystemSetting]:
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("Tənzimləmələr siyahısı tələb olunur")
        parsed = [self._parse(raw if isinstance(raw, dict) else {}) for raw in items]
        saved = self._settings.upsert_many(parsed)
        logger.info("Updated settings: %s", ", ".join(s.key for s in saved))
        return saved

    def update_one(self, key: str, raw: dict) -> SystemSetting:
        item = self._parse(raw, key=key)
        saved = self._settings.upsert(key=item.key, value=item.value, type=item.type, category=item.category)
        logger.info("Updated setting %s", saved.key)
        return saved

    def get_number(self, key: str, default: float) -> float:
        item = self._settings.get(key)
        if not item:
            return default
        try:
            return float(item.value)
        except ValueError:
            return default

    def commission_rate(self) -> float:
        """Platform commission as a fraction (10% -> 0.1)."""
        return self.get_number(COMMISSION_SETTING_KEY, DEFAULT_COMMISSION_PERCENT) / 100.0

    def ensure_defaults(self) -> None:
        missing = [item for item in DEFAULT_SETTINGS if not self._settings.get(item.key)]
        if missing:
            self._settings.upsert_many(missing)
