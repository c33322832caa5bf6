from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SHEET_NAMES = {"orders": "Sifarişlər", "users": "İstifadəçilər", "masters": "Ustalar"}


def to_xlsx(rows: Sequence[dict], *, kind: str) -> io.BytesIO:
    """Write the rows into an in-memory workbook with a single sheet."""
    df = pd.DataFrame(list(rows))

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAMES.get(kind, kind))
    output.seek(0)
    return output
