"""
Error handlers — one per domain exception type.

Services raise ``gcg_hub.core.exceptions`` types; this module turns them into
the standard ``{"error", "code", "details"}`` body via ``api_error``. HTTP
errors raised by Flask itself (404 route, 405, 413) get the same shape.
"""

import logging

from flask import request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from gcg_hub.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DuplicateError,
    ForbiddenError,
    NotFoundError,
    ReferentialError,
    StoreUnavailableError,
    ValidationError,
)
from gcg_hub.utils.errors import E, api_error

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: E.VALIDATION_INVALID,
    401: E.UNAUTHENTICATED,
    403: E.FORBIDDEN,
    404: E.NOT_FOUND,
    409: E.CONFLICT_DUPLICATE,
}


def register_error_handlers(app):

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        missing = error.details and all(v == "missing" for v in error.details.values())
        code = E.VALIDATION_REQUIRED if missing else E.VALIDATION_INVALID
        return api_error(code, str(error), details=error.details)

    @app.errorhandler(ReferentialError)
    def _handle_referential(error: ReferentialError):
        return api_error(E.REFERENCE_MISSING, str(error), details={"resource": error.resource})

    @app.errorhandler(AuthenticationError)
    def _handle_authentication(error: AuthenticationError):
        return api_error(E.UNAUTHENTICATED, str(error))

    @app.errorhandler(ForbiddenError)
    def _handle_forbidden(error: ForbiddenError):
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        return api_error(E.NOT_FOUND, str(error))

    @app.errorhandler(DuplicateError)
    def _handle_duplicate(error: DuplicateError):
        return api_error(E.CONFLICT_DUPLICATE, str(error), details={"field": error.field})

    @app.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(
            E.CONFLICT_DEPENDENTS,
            str(error),
            details={"dependents": error.dependents, "dependent_count": error.dependent_count},
        )

    @app.errorhandler(StoreUnavailableError)
    def _handle_store_unavailable(error: StoreUnavailableError):
        return api_error(E.STORE_UNAVAILABLE, str(error))

    @app.errorhandler(OperationalError)
    def _handle_operational(error: OperationalError):
        logger.exception("Database operational error endpoint=%s", request.endpoint)
        return api_error(E.STORE_UNAVAILABLE, "Database unavailable")

    @app.errorhandler(413)
    def _handle_too_large(error):
        limit = app.config.get("MAX_UPLOAD_SIZE")
        return api_error(
            E.VALIDATION_INVALID,
            f"File too large. Maximum size is {limit} bytes",
            status=413,
        )

    @app.errorhandler(429)
    def _handle_rate_limited(error):
        return api_error(E.RATE_LIMITED, "Too many requests", details={"limit": error.description})

    @app.errorhandler(HTTPException)
    def _handle_http(error: HTTPException):
        code = _HTTP_CODES.get(error.code, E.INTERNAL if error.code >= 500 else E.VALIDATION_INVALID)
        return api_error(code, error.description or error.name, status=error.code)

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        logger.exception("Unexpected error endpoint=%s", request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")
