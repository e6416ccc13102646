from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI
from ninja_jwt.controller import NinjaJWTDefaultController

from accounts.controllers.account import AccountController
from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle, UserDefaultThrottle
from events.controllers.checkout import CheckoutController
from events.controllers.event_admin import EVENT_ADMIN_CONTROLLERS
from events.controllers.events import EventController
from events.controllers.me import MyTicketsController
from events.exceptions import EventifyError
from notifications.controllers.notification_controller import NotificationController
from support.controllers.support import SupportTicketController

from .exception_handlers import handle_django_validation_error, handle_eventify_error, handle_general_exception

api = NinjaExtraAPI(
    title="Eventify API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Eventify API {settings.VERSION}",
    app_name=f"eventify-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle(), UserDefaultThrottle()],
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
    # Auth/Account controllers
    NinjaJWTDefaultController,
    AccountController,
    # Event controllers
    EventController,
    *EVENT_ADMIN_CONTROLLERS,
    CheckoutController,
    MyTicketsController,
    # Notification controllers
    NotificationController,
    # Support controllers
    SupportTicketController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    EventifyError: handle_eventify_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
