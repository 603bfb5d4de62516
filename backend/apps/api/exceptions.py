from __future__ import annotations

from typing import Any, Dict, Mapping, Tuple, Type

from django.core.exceptions import (
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    ParseError,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import error_response
from apps.catalog.exceptions import (
    CatalogError,
    CategoryNotFoundError,
    HandlerNotFoundError,
    ProductConstraintError,
    ProductNotFoundError,
    ShopAssociationNotFoundError,
)
from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="exception")

# Most specific class first; the first isinstance match wins.
CATALOG_ERROR_CODES: Tuple[Tuple[Type[CatalogError], str, int], ...] = (
    (ProductNotFoundError, "NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (CategoryNotFoundError, "NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (ProductConstraintError, "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST),
    (ShopAssociationNotFoundError, "CONFLICT", status.HTTP_409_CONFLICT),
    (HandlerNotFoundError, "SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def catalog_error_response(exc: CatalogError) -> Response:
    for error_type, code, http_status in CATALOG_ERROR_CODES:
        if isinstance(exc, error_type):
            break
    else:
        code, http_status = "CONFLICT", status.HTTP_409_CONFLICT
    if http_status >= 500:
        return error_response(code, "Something went wrong", http_status=http_status)
    return error_response(
        code,
        str(exc) or type(exc).__name__,
        {"type": type(exc).__name__, "code": exc.code},
        http_status=http_status,
    )


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Render every exception raised in a DRF view as an error envelope."""

    log = _bind_logger(context)

    if isinstance(exc, CatalogError):
        response = catalog_error_response(exc)
        log.warning(
            "Handled catalog error",
            error=type(exc).__name__,
            status=response.status_code,
        )
        return response

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(
            exc.message_dict if hasattr(exc, "message_dict") else list(exc.messages)
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        log.exception("Unhandled exception bubbled to global handler")
        return error_response(
            "SERVER_ERROR",
            "Something went wrong",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code, fallback = _code_for(exc)
    details = response.data if isinstance(exc, (ValidationError, ParseError)) else None
    message = _extract_message(response.data, fallback)
    log.info("Converted API exception", code=code, status=response.status_code)
    return error_response(code, message, details, http_status=response.status_code)


def _bind_logger(context: Mapping[str, Any]):
    log = logger
    view = context.get("view")
    if view is not None:
        log = log.bind(view=type(view).__name__)
    return log.bind_request(context.get("request"))


def _code_for(exc: Exception) -> Tuple[str, str]:
    if isinstance(exc, (ValidationError, ParseError)):
        return "VALIDATION_ERROR", "Validation failed"
    if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        return "UNAUTHORIZED", "Authentication required"
    if isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        return "FORBIDDEN", "You do not have permission to perform this action"
    if isinstance(exc, (NotFound, Http404)):
        return "NOT_FOUND", "Resource not found"
    return "REQUEST_FAILED", "Request failed"


def _extract_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("detail"), str):
        return payload["detail"]
    if isinstance(payload, list) and payload and isinstance(payload[0], str):
        return payload[0]
    return fallback


__all__ = ["catalog_error_response", "global_exception_handler"]
