from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select

from ..core.enums import SettingType
from ..database.base import transaction
from ..database.schema import SystemSettingRow
from ..extensions import db
from .model import SystemSetting
from .repository import SettingsRepository


def _to_setting(row: SystemSettingRow) -> SystemSetting:
    try:
        setting_type = SettingType(row.type)
    except ValueError:
        setting_type = SettingType.STRING
    return SystemSetting(
        key=row.key, value=row.value, type=setting_type, category=row.category, updated_at=row.updated_at
    )


class SQLAlchemySettingsRepository(SettingsRepository):
    def _find(self, key: str) -> Optional[SystemSettingRow]:
        return db.session.execute(select(SystemSettingRow).where(SystemSettingRow.key == key)).scalar_one_or_none()

    def list_all(self) -> Sequence[SystemSetting]:
        rows = db.session.execute(
            select(SystemSettingRow).order_by(SystemSettingRow.category, SystemSettingRow.key)
        ).scalars()
        return [_to_setting(r) for r in rows]

    def get(self, key: str) -> Optional[SystemSetting]:
        row = self._find(key)
        return _to_setting(row) if row else None

    def _put(self, session, item: SystemSetting) -> SystemSettingRow:
        row = self._find(item.key)
        if row:
            row.value = item.value
            row.type = item.type.value
            row.category = item.category
        else:
            row = SystemSettingRow(key=item.key, value=item.value, type=item.type.value, category=item.category)
            session.add(row)
        return row

    def upsert_many(self, items: Sequence[SystemSetting]) -> Sequence[SystemSetting]:
        with transaction() as session:
            rows = [self._put(session, item) for item in items]
            session.flush()
            return [_to_setting(r) for r in rows]

    def upsert(self, *, key: str, value: str, type: SettingType, category: str) -> SystemSetting:
        return self.upsert_many([SystemSetting(key=key, value=value, type=type, category=category)])[0]
