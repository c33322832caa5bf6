import pandas as pd
import pytest

from src.ustabul.ustabul.admin.export import to_xlsx
from src.ustabul.ustabul.admin.service import growth_percent


@pytest.mark.parametrize(
    "current, previous, expected",
    [(10, 5, 100.0), (3, 4, -25.0), (0, 0, 0.0), (7, 0, 100.0), (5, 5, 0.0)],
)
def test_growth_percent(current, previous, expected):
    assert growth_percent(current, previous) == expected


def test_xlsx_keeps_rows_and_sheet_name():
    rows = [{"ID": 1, "Ad": "Elvin Həsənov", "Reytinq": 4.5}, {"ID": 2, "Ad": "Rəşad Quliyev", "Reytinq": 0}]

    output = to_xlsx(rows, kind="masters")

    sheets = pd.read_excel(output, sheet_name=None, engine="openpyxl")
    assert list(sheets) == ["Ustalar"]
    assert sheets["Ustalar"]["Ad"].tolist() == ["Elvin Həsənov", "Rəşad Quliyev"]
