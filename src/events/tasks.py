"""Celery tasks for event management."""

import structlog
from celery import shared_task
from django.db.models import Q
from django.utils import timezone

from events.service.event_phase import persist_completed_phase

from .models import Event

logger = structlog.get_logger(__name__)


@shared_task(name="events.tasks.persist_completed_events")
def persist_completed_events() -> int:
    """Persist ``completed`` for events that have ended.

    Only the write-back is batched here; readers already see the completed
    phase through ``effective_phase``. Safe to run periodically.
    """
    now = timezone.now()
    # An event without an end has ended at the latest start + default duration, so it is a candidate once started.
    candidates = Event.objects.pending_completion().filter(Q(start__lte=now) | Q(end__lte=now))

    persisted = sum(persist_completed_phase(event, now) for event in candidates.iterator())
    if persisted:
        logger.info("completed_events_persisted", count=persisted)
    return persisted
