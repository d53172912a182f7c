from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from common.schema import ResponseOk, VersionResponse
from events.controllers.checkin import CheckInController
from events.controllers.tickets import TicketController
from events.exceptions import ExportError, HolderValidationError, TransferError

from .exception_handlers import (
    handle_django_validation_error,
    handle_export_error,
    handle_general_exception,
    handle_holder_validation_error,
    handle_transfer_error,
)

api = NinjaExtraAPI(
    title="Pulakatraca Backend API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Pulakatraca API {settings.VERSION}",
    app_name=f"pulakatraca-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version."""
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    TicketController,
    CheckInController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    HolderValidationError: handle_holder_validation_error,
    TransferError: handle_transfer_error,
    ExportError: handle_export_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
