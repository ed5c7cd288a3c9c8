"""Effective lifecycle phase of an event.

The stored status is only authoritative for ``draft`` and ``cancelled``. Every
other phase is recomputed from the event's timestamps on each read, so nothing
has to fire when a deadline or start time passes. The one transition that is
written back is ``completed`` (see :func:`persist_completed_phase`).
"""

from datetime import datetime, timedelta

import structlog
from django.conf import settings
from django.utils import timezone

from events.models import Event

logger = structlog.get_logger(__name__)

EventStatus = Event.EventStatus


def resolve_phase(
    stored_status: str,
    start: datetime,
    end: datetime | None,
    rsvp_before: datetime | None,
    now: datetime,
    *,
    default_duration: timedelta | None = None,
) -> EventStatus:
    """Map a stored status and timestamps to the effective phase.

    First match wins:
        1. stored draft -> draft
        2. stored cancelled -> cancelled
        3. effective end <= now -> completed
        4. start <= now < effective end -> ongoing
        5. rsvp deadline <= now -> closed
        6. published
    """
    if stored_status == EventStatus.DRAFT:
        return EventStatus.DRAFT
    if stored_status == EventStatus.CANCELLED:
        return EventStatus.CANCELLED

    if end is None:
        if default_duration is None:
            default_duration = timedelta(hours=settings.DEFAULT_EVENT_DURATION_HOURS)
        end = start + default_duration

    if end <= now:
        return EventStatus.COMPLETED
    if start <= now:
        return EventStatus.ONGOING
    if rsvp_before is not None and rsvp_before <= now:
        return EventStatus.CLOSED
    return EventStatus.PUBLISHED


def resolve_phase_to_store(
    stored_status: str,
    start: datetime,
    end: datetime | None,
    rsvp_before: datetime | None,
    now: datetime,
    *,
    default_duration: timedelta | None = None,
) -> EventStatus | None:
    """Return ``completed`` when it should be written back, otherwise None.

    Closed and ongoing are always recomputed and never stored.
    """
    computed = resolve_phase(stored_status, start, end, rsvp_before, now, default_duration=default_duration)
    if computed == EventStatus.COMPLETED and stored_status != EventStatus.COMPLETED:
        return EventStatus.COMPLETED
    return None


def effective_phase(event: Event, now: datetime | None = None) -> EventStatus:
    """The event's phase at ``now`` (defaults to the current time)."""
    return resolve_phase(event.status, event.start, event.end, event.rsvp_before, now or timezone.now())


def phase_to_store(event: Event, now: datetime | None = None) -> EventStatus | None:
    """The status to persist for the event, if any."""
    return resolve_phase_to_store(event.status, event.start, event.end, event.rsvp_before, now or timezone.now())


def can_accept_rsvps(event: Event, now: datetime | None = None) -> bool:
    """Admission, joining and confirming all require a published event."""
    return effective_phase(event, now) == EventStatus.PUBLISHED


def can_be_cancelled(event: Event, now: datetime | None = None) -> bool:
    """Cancelled and completed events cannot be cancelled (again)."""
    return effective_phase(event, now) not in (EventStatus.CANCELLED, EventStatus.COMPLETED)


def phase_label(phase: str) -> str:
    """Human-readable label for a phase."""
    return str(EventStatus(phase).label)


def persist_completed_phase(event: Event, now: datetime | None = None) -> bool:
    """Write ``completed`` back to storage once the event has ended.

    The update is conditional on the stored status, so repeated or concurrent calls
    change the row at most once. Returns whether this call changed it.
    """
    now = now or timezone.now()
    if phase_to_store(event, now) is None:
        return False

    updated = (
        Event.objects.filter(pk=event.pk)
        .exclude(status__in=[EventStatus.COMPLETED, EventStatus.DRAFT, EventStatus.CANCELLED])
        .update(status=EventStatus.COMPLETED, updated_at=now)
    )
    if updated:
        event.status = EventStatus.COMPLETED
        logger.info("event_phase_persisted", event_id=str(event.pk), status=EventStatus.COMPLETED)
    return bool(updated)
