"""Service layer for user accounts."""

import structlog
from django.contrib.auth.password_validation import validate_password
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError

from accounts import schema
from accounts.models import EventifyUser

logger = structlog.get_logger(__name__)


@transaction.atomic
def register_user(payload: schema.RegisterUserSchema) -> EventifyUser:
    """Register a new user.

    Args:
        payload: The user data.

    Returns:
        The newly created user.
    """
    logger.info("user_registration_started", email=payload.email)
    if EventifyUser.objects.filter(username=payload.email).exists():
        logger.warning("user_registration_duplicate", email=payload.email)
        raise HttpError(400, str(_("A user with this email already exists.")))
    validate_password(payload.password1)
    new_user = EventifyUser.objects.create_user(
        username=payload.email,
        email=payload.email,
        password=payload.password1,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
    )
    logger.info("user_registration_completed", user_id=str(new_user.id), role=new_user.role)
    return new_user
