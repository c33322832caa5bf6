from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import SettingType
from .model import SystemSetting


class SettingsRepository(Protocol):
    def list_all(self) -> Sequence[SystemSetting]:
        raise NotImplementedError

    def get(self, key: str) -> Optional[SystemSetting]:
        raise NotImplementedError

    def upsert_many(self, items: Sequence[SystemSetting]) -> Sequence[SystemSetting]:
        raise NotImplementedError

    def upsert(self, *, key: str, value: str, type: SettingType, category: str) -> SystemSetting:
        raise NotImplementedError
