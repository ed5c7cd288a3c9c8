# src/events/signals.py

import typing as t
from uuid import UUID

import structlog
from django.dispatch import Signal, receiver

from events.models import Event

logger = structlog.get_logger(__name__)

# Sent after commit when a confirmed attendance record is downgraded or removed.
# Expected kwargs:
#   - event_id: UUID of the event
#   - user_id: UUID of the person who freed the spot
attendance_vacated = Signal()


@receiver(attendance_vacated)
def handle_attendance_vacated(sender: t.Any, event_id: UUID, user_id: UUID, **kwargs: t.Any) -> None:
    """Offer the freed spot to the next person on the waitlist."""
    from events.service.admission import PromotionEngine

    event = Event.objects.with_open_waitlist().filter(pk=event_id).first()
    if event is None:
        return

    entry = PromotionEngine(event).promote_next()
    logger.info(
        "attendance_vacated_handled",
        event_id=str(event_id),
        vacated_by=str(user_id),
        offered_entry_id=str(entry.id) if entry else None,
    )
