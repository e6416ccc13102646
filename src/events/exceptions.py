"""Domain errors for ticketing.

Each error carries a stable ``kind`` that clients can branch on and a human-readable message.
The API layer maps them to HTTP status codes in one place.
"""

import typing as t


class EventifyError(Exception):
    """Base class for all ticketing errors."""

    kind: t.ClassVar[str] = "Error"
    status_code: t.ClassVar[int] = 400
    default_message: t.ClassVar[str] = "The operation could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(EventifyError):
    """Event, tier, ticket, payment or waitlist entry does not exist."""

    kind = "NotFound"
    status_code = 404
    default_message = "Not found."


class UnauthorizedError(EventifyError):
    """The actor is neither the organizer of the event nor an administrator."""

    kind = "Unauthorized"
    status_code = 403
    default_message = "You are not allowed to perform this action."


class CapacityExceededError(EventifyError):
    """Event-level capacity would be exceeded."""

    kind = "CapacityExceeded"
    status_code = 409
    default_message = "The event is at full capacity."


class TierSoldOutError(EventifyError):
    """The tier is inactive or has fewer tickets left than requested."""

    kind = "TierSoldOut"
    status_code = 409
    default_message = "Not enough tickets left in this tier."


class AlreadyCancelledError(EventifyError):
    kind = "AlreadyCancelled"
    status_code = 409
    default_message = "The ticket is already cancelled."


class AlreadyReleasedError(EventifyError):
    """Capacity for this ticket or payment was already given back."""

    kind = "AlreadyReleased"
    status_code = 409
    default_message = "The ticket has already been released."


class AlreadyWaitlistedError(EventifyError):
    kind = "AlreadyWaitlisted"
    status_code = 409
    default_message = "You are already on the waitlist for this tier."


class AlreadyBookedError(EventifyError):
    """The payment reference was already used for a completed order."""

    kind = "AlreadyBooked"
    status_code = 409
    default_message = "This payment has already been used for a booking."


class AlreadyCheckedInError(EventifyError):
    kind = "AlreadyCheckedIn"
    status_code = 409
    default_message = "The ticket has already been checked in."


class InvalidStateTransitionError(EventifyError):
    kind = "InvalidStateTransition"
    status_code = 409
    default_message = "This change is not allowed in the current state."


class PaymentNotCompletedError(EventifyError):
    """The gateway reports the payment as not (yet) captured."""

    kind = "PaymentNotCompleted"
    status_code = 400
    default_message = "The payment has not been completed."


class UpstreamFailureError(EventifyError):
    """The payment gateway or another external service failed."""

    kind = "UpstreamFailure"
    status_code = 502
    default_message = "An external service failed. Please try again later."


class PaymentMismatchError(EventifyError):
    """The captured payment was opened for a different order."""

    kind = "PaymentMismatch"
    status_code = 400
    default_message = "The payment does not match this order."
