from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import SettingType


@dataclass(frozen=True)
class SystemSetting:
    key: str
    value: str
    type: SettingType = SettingType.STRING
    category: str = "general"
    updated_at: Optional[datetime] = None

    @property
    def typed_value(self) -> Any:
        if self.type == SettingType.NUMBER:
            try:
                return float(self.value)
            except ValueError:
                return None
        if self.type == SettingType.BOOLEAN:
            return self.value.strip().lower() in {"1", "true", "yes", "on"}
        if self.type == SettingType.JSON:
            try:
                return json.loads(self.value)
            except ValueError:
                return None
        return self.value
