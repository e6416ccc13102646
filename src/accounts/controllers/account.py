"""Account controllers."""

import typing as t

from ninja_extra import ControllerBase, api_controller, route, status

from accounts import schema
from accounts.models import EventifyUser
from accounts.service import account as account_service
from common.authentication import EventifyJWTAuth
from common.throttling import AuthThrottle, UserRegistrationThrottle


@api_controller("/account", tags=["Account"], throttle=AuthThrottle())
class AccountController(ControllerBase):
    def user(self) -> EventifyUser:
        """Get the user for this request."""
        return t.cast(EventifyUser, self.context.request.user)  # type: ignore[union-attr]

    @route.get("/me", response=schema.EventifyUserSchema, url_name="me", auth=EventifyJWTAuth())
    def me(self) -> EventifyUser:
        """Retrieve the authenticated user's profile, including their role."""
        return self.user()

    @route.post(
        "/register",
        response={201: schema.EventifyUserSchema},
        url_name="register-account",
        throttle=UserRegistrationThrottle(),
    )
    def register(self, payload: schema.RegisterUserSchema) -> tuple[int, EventifyUser]:
        """Create a new attendee or organizer account.

        Administrators cannot be self-registered. Use the token endpoints to log in afterwards.
        """
        user = account_service.register_user(payload)
        return status.HTTP_201_CREATED, user
