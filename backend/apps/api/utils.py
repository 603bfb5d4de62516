from collections.abc import Mapping
from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.serializers import as_serializer_error

ERROR_STATUS_MAP = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "SERVER_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _normalize_details(details: Any) -> Any:
    if isinstance(details, ValidationError):
        return as_serializer_error(details)
    if isinstance(details, Mapping):
        return dict(details)
    if isinstance(details, Exception):
        return {"type": details.__class__.__name__}
    return details


def error_response(
    code: str,
    message: str,
    details: Optional[Any] = None,
    http_status: Optional[int] = None,
) -> Response:
    """
    Build the ``{"error": {...}}`` envelope shared by the JSON endpoints.

    The status defaults to the one registered for ``code`` in
    ``ERROR_STATUS_MAP``, or 400 for unknown codes.
    """
    if not isinstance(code, str) or not code.strip():
        raise ValueError("error_response requires a non-empty code")
    if not isinstance(message, str) or not message.strip():
        raise ValueError("error_response requires a non-empty message")

    code = code.strip().upper()
    status_code = (
        int(http_status)
        if http_status is not None
        else ERROR_STATUS_MAP.get(code, status.HTTP_400_BAD_REQUEST)
    )
    if not 100 <= status_code <= 599:
        raise ValueError("error_response status must be a valid HTTP status code")

    payload: Dict[str, Any] = {
        "error": {"code": code, "message": message.strip(), "status": status_code}
    }
    if details is not None:
        payload["error"]["details"] = _normalize_details(details)
    return Response(payload, status=status_code)
