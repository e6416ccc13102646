import typing as t

from django.contrib.auth.models import AnonymousUser
from ninja_extra import ControllerBase

from accounts.models import EventifyUser


class UserAwareController(ControllerBase):
    def maybe_user(self) -> EventifyUser | AnonymousUser:
        """Get the user for this request."""
        return t.cast(EventifyUser | AnonymousUser, self.context.request.user)  # type: ignore[union-attr]

    def user(self) -> EventifyUser:
        """Get the user for this request."""
        return t.cast(EventifyUser, self.context.request.user)  # type: ignore[union-attr]
