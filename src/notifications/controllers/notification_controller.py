"""API controller for in-app notifications."""

from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext as _
from ninja import Query
from ninja_extra import api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, paginate

from common.authentication import EventifyJWTAuth
from common.controllers import UserAwareController
from common.schema import ErrorResponse
from common.throttling import UserDefaultThrottle, WriteThrottle
from events.controllers.lookups import get_or_not_found
from events.models import Event
from events.service import event_service
from notifications.filters import NotificationFilterSchema
from notifications.models import Notification
from notifications.schema import EventReminderSchema, NotificationSchema, ReminderSentSchema, UnreadCountSchema


@api_controller(
    "/notifications",
    tags=["Notifications"],
    auth=EventifyJWTAuth(),
    throttle=UserDefaultThrottle(),
)
class NotificationController(UserAwareController):
    @route.get(
        "",
        url_name="list-notifications",
        response=PageNumberPaginationExtra.get_response_schema(NotificationSchema),
    )
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_notifications(
        self,
        params: NotificationFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[Notification]:
        """List the user's notifications, newest first.

        Supports filtering by unread status and notification type.
        """
        qs = Notification.objects.filter(user=self.user()).order_by("-created_at")
        return params.filter(qs)

    @route.get("/unread-count", url_name="unread-notification-count", response=UnreadCountSchema)
    def unread_count(self) -> dict[str, int]:
        return {"count": Notification.objects.filter(user=self.user(), read_at__isnull=True).count()}

    @route.post("/{notification_id}/mark-read", url_name="mark-notification-read", throttle=WriteThrottle())
    def mark_read(self, notification_id: UUID) -> None:
        notification = get_object_or_404(Notification, id=notification_id, user=self.user())
        notification.mark_read()

    @route.post("/{notification_id}/mark-unread", url_name="mark-notification-unread", throttle=WriteThrottle())
    def mark_unread(self, notification_id: UUID) -> None:
        notification = get_object_or_404(Notification, id=notification_id, user=self.user())
        notification.mark_unread()

    @route.post("/mark-all-read", url_name="mark-all-notifications-read", throttle=WriteThrottle())
    def mark_all_read(self) -> None:
        Notification.objects.filter(user=self.user(), read_at__isnull=True).update(read_at=timezone.now())

    @route.delete(
        "/{notification_id}",
        url_name="delete-notification",
        response={204: None, 404: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def delete_notification(self, notification_id: UUID) -> tuple[int, None]:
        notification = get_object_or_404(Notification, id=notification_id, user=self.user())
        notification.delete()
        return 204, None

    @route.post(
        "/reminder",
        url_name="send-event-reminder",
        response={200: ReminderSentSchema, 403: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
        throttle=WriteThrottle(),
    )
    def send_event_reminder(self, payload: EventReminderSchema) -> dict[str, int]:
        """Remind everyone holding a confirmed ticket. Organizers of the event and admins only."""
        event = get_or_not_found(Event.objects.select_related("organizer"), _("Event not found."), pk=payload.event_id)
        return {"count": event_service.send_reminder(event, self.user(), payload.message)}
