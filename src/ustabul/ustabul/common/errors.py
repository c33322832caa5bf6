from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    IntegrationError,
    NotFoundError,
    ValidationError,
)
from .responses import fail

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (IntegrationError, 500),
)


def status_for(error: DomainError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            logger.error("Integration failure: %s", e)
        return fail(str(e), status)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return fail("Fayl çox böyükdür", 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code == 404:
            return fail("Tapılmadı", 404)
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error: %s", e)
        return fail("Daxili server xətası", 500)
