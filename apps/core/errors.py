"""
Error taxonomy shared by every app.
Services raise ServiceError; views and the DRF exception handler render it as
{"ok": false, "error": CODE, "details"?: ...} with the matching HTTP status.
"""

import logging

from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger("spst.errors")


class ServiceError(Exception):
    """Business failure with a wire-level error code."""

    def __init__(self, code: str, http_status: int = status.HTTP_400_BAD_REQUEST, details=None):
        super().__init__(code)
        self.code    = code
        self.status  = http_status
        self.details = details

    def as_response(self) -> Response:
        return error_response(self.code, self.status, self.details)


def error_response(code: str, http_status: int, details=None) -> Response:
    body = {"ok": False, "error": code}
    if details is not None:
        body["details"] = details
    return Response(body, status=http_status)


def db_error(exc, context: str) -> ServiceError:
    """Log a persistence failure and wrap it as DB_ERROR (message passed through)."""
    logger.error("DB error in %s: %s", context, exc)
    return ServiceError("DB_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR, details=str(exc))


_DRF_CODES = (
    (exceptions.NotAuthenticated,     "UNAUTHENTICATED"),
    (exceptions.AuthenticationFailed, "UNAUTHENTICATED"),
    (exceptions.PermissionDenied,     "FORBIDDEN"),
    (exceptions.NotFound,             "NOT_FOUND"),
    (Http404,                         "NOT_FOUND"),
    (exceptions.ParseError,           "BAD_JSON"),
    (exceptions.ValidationError,      "INVALID_PAYLOAD"),
)


def api_exception_handler(exc, context):
    """DRF EXCEPTION_HANDLER: uniform error bodies, UNEXPECTED_ERROR for the rest."""
    if isinstance(exc, ServiceError):
        return exc.as_response()

    response = exception_handler(exc, context)
    if response is not None:
        code = next((c for cls, c in _DRF_CODES if isinstance(exc, cls)), None)
        if code:
            body = {"ok": False, "error": code}
            if code == "INVALID_PAYLOAD":
                body["details"] = response.data
            response.data = body
        return response

    view = context.get("view")
    logger.exception("Unhandled error in %s", type(view).__name__ if view else "view")
    return error_response(
        "UNEXPECTED_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR, details=str(exc)
    )
