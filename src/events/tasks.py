"""Celery tasks for event management."""

import structlog
from celery import shared_task

from events.service import event_service

logger = structlog.get_logger(__name__)


@shared_task
def close_expired_events() -> int:
    """Persist ENDED for every LIVE event whose end date has passed.

    Runs on the beat schedule. Clients already see such events as ended through
    ``Event.computed_status``; this makes the stored status catch up.
    """
    count = event_service.close_expired_events()
    if count:
        logger.info("close_expired_events_task_done", count=count)
    return count
