"""Exception handlers for the API."""

import typing as t

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from events.exceptions import ExportError, HolderValidationError, TransferError

logger = structlog.get_logger(__name__)


def _json_payload(request: HttpRequest) -> t.Any:
    if request.method not in ("POST", "PUT", "PATCH") or request.content_type != "application/json":
        return None
    try:
        return orjson.loads(request.body)
    except orjson.JSONDecodeError:  # pragma: no cover
        return None


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Log unexpected errors and answer with a generic 500.

    JSON request bodies are logged along with the error; the logging pipeline
    redacts credentials and documents.
    """
    logger.exception(
        "INTERNAL_SERVER_ERROR", method=request.method, path=request.path, payload=_json_payload(request)
    )
    data: dict[str, t.Any] = {"detail": "Internal Server Error."}
    is_staff = getattr(request, "user", None) and request.user.is_staff
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["error"] = repr(exc)
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a model validation error.

    Field errors are returned per field; non-field errors under ``__all__``.
    """
    logger.warning("VALIDATION_ERROR", path=request.path)
    if hasattr(exc, "error_dict"):
        error_dict = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        error_dict = {"__all__": list(getattr(exc, "messages", [str(exc)]))}
    return Response(status=400, data={"errors": error_dict})


def handle_holder_validation_error(
    request: HttpRequest, exc: HolderValidationError | t.Type[HolderValidationError]
) -> Response:
    """Handle an invalid holder form."""
    return Response(status=400, data={"errors": getattr(exc, "errors", {})})


def handle_transfer_error(request: HttpRequest, exc: TransferError | t.Type[TransferError]) -> Response:
    """Handle a transfer error that escaped the transfer protocol."""
    return Response(status=400, data={"detail": getattr(exc, "message", TransferError.default_message)})


def handle_export_error(request: HttpRequest, exc: ExportError | t.Type[ExportError]) -> Response:
    """Handle an export error that escaped the ticket screen."""
    return Response(status=400, data={"detail": getattr(exc, "message", ExportError.default_message)})
