"""Notification signals.

Expected kwargs for ``notification_requested``:
  - notification_type: NotificationType value
  - user: EventifyUser instance
  - context: dict matching the notification type's context schema
"""

from django.dispatch import Signal

notification_requested = Signal()

__all__ = ["notification_requested"]
