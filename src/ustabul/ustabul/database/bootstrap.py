"""Schema creation and demo data for development databases."""
from __future__ import annotations

import logging
from typing import Sequence

import mysql.connector
from sqlalchemy import inspect, select
from sqlalchemy.engine import make_url
from werkzeug.security import generate_password_hash

from ..common.datetime_utils import now_local
from ..core.enums import Role
from ..extensions import db
from ..settings.service import DEFAULT_SETTINGS
from .base import transaction
from .schema import (
    CategoryRow,
    CustomerRow,
    MasterRow,
    MasterServiceRow,
    SubcategoryRow,
    SystemSettingRow,
    UserRow,
)

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo123"

# (name, slug, description, icon, color, [(subcategory name, slug, base price)])
CATEGORIES = (
    (
        "Santexnik",
        "santexnika",
        "Kran təmiri, boru dəyişimi, kanalizasiya təmizliyi",
        "🔧",
        "#3B82F6",
        (
            ("Kran təmiri", "kran-temiri", 25),
            ("Unitaz quraşdırma", "unitaz-qurashdirma", 60),
            ("Boru təmiri", "boru-temiri", 40),
            ("Kanalizasiya təmizliyi", "kanalizasiya-temizliyi", 50),
            ("Su sayğacı quraşdırma", "su-saygaci", 35),
        ),
    ),
    (
        "Elektrik",
        "elektrik",
        "Elektrik xətləri, rozetka quraşdırma, işıqlandırma",
        "⚡",
        "#F59E0B",
        (
            ("Rozetka quraşdırma", "rozetka-qurashdirma", 15),
            ("Elektrik təmiri", "elektrik-temiri", 40),
            ("LED işıqlandırma", "led-ishiqlandirma", 30),
            ("Elektrik pano quraşdırma", "elektrik-pano", 120),
        ),
    ),
    (
        "Ev təmiri",
        "temir",
        "Kompleks ev təmiri və dekorasiya işləri",
        "🏠",
        "#10B981",
        (
            ("Mətbəx təmiri", "metbex-temiri", 500),
            ("Vanna təmiri", "vanna-temiri", 400),
            ("Otaq təmiri", "otaq-temiri", 300),
            ("Balkon təmiri", "balkon-temiri", 250),
        ),
    ),
    (
        "Kondisioner",
        "kondisioner",
        "Kondisioner quraşdırma, təmizlik və təmir",
        "❄️",
        "#06B6D4",
        (
            ("Kondisioner quraşdırma", "kond-qurashdirma", 80),
            ("Kondisioner təmizliyi", "kond-temizlik", 40),
            ("Kondisioner təmiri", "kond-temiri", 60),
            ("Freon doldurma", "freon-doldurma", 50),
        ),
    ),
    (
        "Rəngsazlıq",
        "rengsazliq",
        "Divar boyama, dekorativ rəngləmə",
        "🎨",
        "#8B5CF6",
        (
            ("Divar boyama", "divar-boyama", 8),
            ("Dekorativ rəngləmə", "dekorativ-rengleme", 15),
            ("Tavan boyama", "tavan-boyama", 10),
        ),
    ),
    (
        "Təmizlik",
        "temizlik",
        "Ev, ofis və mənzil təmizliyi",
        "🧹",
        "#EC4899",
        (
            ("Ev təmizliyi", "ev-temizliyi", 50),
            ("Ofis təmizliyi", "ofis-temizliyi", 80),
            ("Pəncərə yuma", "pencere-yuma", 30),
            ("Tikintidən sonra təmizlik", "tikinti-temizliyi", 150),
        ),
    ),
)


def ensure_database_exists(uri: str) -> None:
    """CREATE DATABASE IF NOT EXISTS for MySQL URIs; other backends are left alone."""
    url = make_url(uri)
    if not url.drivername.startswith("mysql") or not url.database:
        return

    conn = mysql.connector.connect(
        host=url.host or "localhost",
        port=url.port or 3306,
        user=url.username or "root",
        password=url.password or "",
        use_pure=True,
    )
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{url.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def init_schema() -> None:
    db.create_all()


def list_tables() -> Sequence[str]:
    return inspect(db.engine).get_table_names()


def seed_categories() -> int:
    created = 0
    with transaction() as session:
        for order, (name, slug, description, icon, color, subs) in enumerate(CATEGORIES, start=1):
            category = session.execute(select(CategoryRow).where(CategoryRow.slug == slug)).scalar_one_or_none()
            if category:
                continue
            category = CategoryRow(name=name, slug=slug, description=description, icon=icon, color=color, order=order)
            category.subcategories = [
                SubcategoryRow(name=sub_name, slug=sub_slug, base_price=float(price), order=i)
                for i, (sub_name, sub_slug, price) in enumerate(subs, start=1)
            ]
            session.add(category)
            created += 1
    return created


def seed_settings() -> None:
    with transaction() as session:
        for item in DEFAULT_SETTINGS:
            exists = session.execute(
                select(SystemSettingRow.id).where(SystemSettingRow.key == item.key)
            ).scalar_one_or_none()
            if not exists:
                session.add(
                    SystemSettingRow(key=item.key, value=item.value, type=item.type.value, category=item.category)
                )


def _upsert_user(session, *, email: str, role: Role, phone: str) -> UserRow:
    user = session.execute(select(UserRow).where(UserRow.email == email)).scalar_one_or_none()
    if not user:
        user = UserRow(email=email, phone=phone)
        session.add(user)
    user.password_hash = generate_password_hash(DEMO_PASSWORD)
    user.role = role.value
    user.is_active = True
    user.email_verified_at = user.email_verified_at or now_local()
    return user


def ensure_demo_users() -> None:
    """Demo accounts (password demo123): customer, master and admin."""
    with transaction() as session:
        customer = _upsert_user(session, email="musteri@demo.az", role=Role.CUSTOMER, phone="+994501112233")
        if not customer.customer:
            customer.customer = CustomerRow(
                first_name="Anar", last_name="Məmmədov", phone=customer.phone, district="Yasamal"
            )

        master = _upsert_user(session, email="usta@demo.az", role=Role.MASTER, phone="+994552223344")
        if not master.master:
            categories = list(
                session.execute(
                    select(CategoryRow).where(CategoryRow.slug.in_(("santexnika", "elektrik")))
                ).scalars()
            )
            master.master = MasterRow(
                first_name="Elvin",
                last_name="Həsənov",
                phone=master.phone,
                bio="10 illik təcrübəyə malik santexnik və elektrik ustası",
                district="Nəsimi",
                districts=["Nəsimi", "Yasamal", "Nərimanov"],
                experience=10,
                hourly_rate=20.0,
                is_verified=True,
                categories=categories,
            )
            by_slug = {c.slug: c.id for c in categories}
            master.master.services = [
                MasterServiceRow(name="Kran təmiri", price=25.0, duration=60, category_id=by_slug.get("santexnika")),
                MasterServiceRow(name="Rozetka quraşdırma", price=15.0, duration=30, category_id=by_slug.get("elektrik")),
            ]

        _upsert_user(session, email="admin@demo.az", role=Role.ADMIN, phone="+994703334455")
    logger.info("Demo users ready")


def seed_demo_data() -> None:
    seed_categories()
    seed_settings()
    ensure_demo_users()
