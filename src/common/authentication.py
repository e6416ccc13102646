import typing as t

import structlog
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class EventifyJWTAuth(JWTAuth):
    """JWT authentication that binds the authenticated user to the log context.

    Usage:
        @route.get("/endpoint", auth=EventifyJWTAuth())
        def my_endpoint(request):
            ...
    """

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and bind user context for structured logs.

        Raises:
            AuthenticationFailed: If authentication fails
            InvalidToken: If the token is invalid
        """
        user = super().authenticate(request, token)
        if user is not None:
            structlog.contextvars.bind_contextvars(user_id=str(user.pk), user_role=getattr(user, "role", None))
        return user


class OptionalAuth(EventifyJWTAuth):
    """Optional JWT authentication.

    - If a JWT token is present the user is authenticated.
    - Without a token request.user is an AnonymousUser and the request continues.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides EventifyJWTAuth __call__ to provide optional auth."""
        auth_value = request.headers.get(self.header)
        if not auth_value:
            request.user = AnonymousUser()
            return request.user
        parts = auth_value.split(" ")

        if parts[0].lower() != self.openapi_scheme:
            logger.warning("unexpected_auth_scheme", scheme=parts[0])
            return None
        token = " ".join(parts[1:])
        return self.authenticate(request, token)
