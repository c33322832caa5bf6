from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.errors import register_error_handlers
from .common.logging_config import setup_logging
from .container import build_container
from .database.bootstrap import ensure_database_exists, init_schema, list_tables, seed_demo_data
from .extensions import db

from .admin.controller import register as register_admin
from .applications.controller import register as register_applications
from .catalog.controller import register as register_catalog
from .masters.controller import register as register_masters
from .messaging.controller import register as register_messaging
from .notifications.controller import register as register_notifications
from .orders.controller import register as register_orders
from .payments.controller import register as register_payments
from .reviews.controller import register as register_reviews
from .uploads.controller import register as register_uploads
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    app.config.from_object(importlib.import_module(settings_module))
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FILE"))
    app.json.ensure_ascii = False
    app.permanent_session_lifetime = timedelta(days=int(app.config.get("SESSION_DAYS", 7)))
    app.config["MAX_CONTENT_LENGTH"] = int(app.config.get("MAX_UPLOAD_MB", 5)) * 1024 * 1024 + 64 * 1024

    db.init_app(app)
    container = build_container(app.config)

    with app.app_context():
        if app.config.get("AUTO_INIT_DB"):
            ensure_database_exists(app.config["SQLALCHEMY_DATABASE_URI"])
            init_schema()
            container.settings_service.ensure_defaults()
            logger.info("Schema ready (settings=%s, tables=%d)", settings_module, len(list_tables()))
        if app.config.get("AUTO_SEED_DB"):
            seed_demo_data()
            logger.info("Demo seed ready")

    register_error_handlers(app)
    register_users(app, container)
    register_catalog(app, container)
    register_masters(app, container)
    register_orders(app, container)
    register_applications(app, container)
    register_reviews(app, container)
    register_messaging(app, container)
    register_notifications(app, container)
    register_payments(app, container)
    register_uploads(app, container)
    register_admin(app, container)

    app.extensions["ustabul"] = container
    return app
