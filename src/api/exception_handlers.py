"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import EventifyError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"password", "password1", "password2", "token", "refresh", "access", "authorization", "cookie"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data


def handle_eventify_error(request: HttpRequest, exc: EventifyError | t.Type[EventifyError]) -> Response:
    """Render a domain error as ``{"kind", "detail"}`` with its status code."""
    assert isinstance(exc, EventifyError)
    logger.info(
        "domain_error",
        kind=exc.kind,
        status_code=exc.status_code,
        detail=exc.message,
        path=request.path,
        method=request.method,
    )
    return Response(status=exc.status_code, data={"kind": exc.kind, "detail": str(exc.message)})


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Model validation failures are client errors with per-field messages."""
    assert isinstance(exc, ValidationError)
    logger.warning("validation_error", path=request.path, method=request.method)
    if hasattr(exc, "error_dict"):
        errors = {key: [message for error in value for message in error] for key, value in exc.error_dict.items()}
    else:
        errors = {"__all__": exc.messages}
    return Response(status=400, data={"errors": errors})


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log the failure with an obfuscated request summary and answer 500."""
    data: dict[str, t.Any] = {"detail": "Internal Server Error."}
    metadata = {
        "headers": obfuscate(dict(request.headers)),
        "method": request.method,
        "path": request.path,
        "GET": obfuscate(request.GET.dict()),
        "user": str(request.user.pk) if getattr(request, "user", None) and request.user.is_authenticated else None,
    }
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            payload = orjson.loads(request.body)
        except orjson.JSONDecodeError:
            payload = None
        if isinstance(payload, dict):
            json_payload = obfuscate(payload)
    logger.exception("internal_server_error", request_metadata=metadata, json_payload=json_payload)
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)
