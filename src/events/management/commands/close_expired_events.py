"""Run the end-of-event sweep once, outside of Celery beat."""

import typing as t

from django.core.management.base import BaseCommand

from events.service import event_service


class Command(BaseCommand):
    help = "Move live events whose end date has passed to ENDED."

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        count = event_service.close_expired_events()
        self.stdout.write(self.style.SUCCESS(f"Closed {count} event(s)."))
