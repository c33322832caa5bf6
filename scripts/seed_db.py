from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.ustabul.ustabul.main import create_app
from src.ustabul.ustabul.database.bootstrap import seed_demo_data


def main() -> None:
    app = create_app({"AUTO_INIT_DB": True, "AUTO_SEED_DB": False})
    with app.app_context():
        seed_demo_data()
    print("OK: seeded categories, settings and demo users (musteri@demo.az, usta@demo.az, admin@demo.az / demo123)")


if __name__ == "__main__":
    main()
