from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask import has_request_context, request, session

PACKAGE_LOGGER = __name__.rsplit(".common", 1)[0]

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [user=%(user_id)s %(path)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Attach the session user and request path to every record."""

    def filter(self, record):
        if has_request_context():
            record.user_id = session.get("user_id", "-")
            record.path = request.path
        else:
            record.user_id = "-"
            record.path = "-"
        return True


class SafeFormatter(logging.Formatter):
    def format(self, record):
        for name in ("user_id", "path"):
            if not hasattr(record, name):
                setattr(record, name, "-")
        return super().format(record)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(logging.WARNING)
    formatter = SafeFormatter(LOG_FORMAT)

    if not any(getattr(h, "_ustabul", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler.addFilter(RequestContextFilter())
        handler._ustabul = True
        root.addHandler(handler)

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
            file_handler.setFormatter(formatter)
            file_handler.addFilter(RequestContextFilter())
            file_handler._ustabul = True
            root.addHandler(file_handler)

    # Everything under the package logs at the configured level, third parties stay at WARNING.
    logging.getLogger(PACKAGE_LOGGER).setLevel(getattr(logging, level.upper(), logging.INFO))
    return root
