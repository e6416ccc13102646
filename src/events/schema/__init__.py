"""Events schema package.

Modules mirror the models package; everything is re-exported here.
"""

from .event import EventCreateSchema, EventSchema, EventUpdateSchema, MinimalEventSchema
from .payment import (
    AttendeeSchema,
    BookingResponseSchema,
    ConfirmPaymentSchema,
    PaymentIntentCreateSchema,
    PaymentIntentResponseSchema,
    PaymentSchema,
    RefundRequestSchema,
    RefundResponseSchema,
)
from .ticket import (
    AdminTicketSchema,
    CancelTicketSchema,
    CheckInRequestSchema,
    MinimalPaymentSchema,
    NoShowResponseSchema,
    TicketSchema,
    TicketTierCreateSchema,
    TicketTierSchema,
    TicketTierUpdateSchema,
)
from .waitlist import WaitlistEntrySchema, WaitlistJoinSchema, WaitlistStatusUpdateSchema

__all__ = [
    "AdminTicketSchema",
    "AttendeeSchema",
    "BookingResponseSchema",
    "CancelTicketSchema",
    "CheckInRequestSchema",
    "ConfirmPaymentSchema",
    "EventCreateSchema",
    "EventSchema",
    "EventUpdateSchema",
    "MinimalEventSchema",
    "MinimalPaymentSchema",
    "NoShowResponseSchema",
    "PaymentIntentCreateSchema",
    "PaymentIntentResponseSchema",
    "PaymentSchema",
    "RefundRequestSchema",
    "RefundResponseSchema",
    "TicketSchema",
    "TicketTierCreateSchema",
    "TicketTierSchema",
    "TicketTierUpdateSchema",
    "WaitlistEntrySchema",
    "WaitlistJoinSchema",
    "WaitlistStatusUpdateSchema",
]
