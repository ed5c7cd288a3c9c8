"""Shared checks for the admission, waitlist, promotion and confirmation steps.

All helpers expect to run inside ``transaction.atomic`` after :func:`lock_event`,
so counts and lookups reflect committed state under the event's row lock.
"""

import typing as t
from datetime import datetime

from django.utils.translation import gettext as _

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP
from events.service.event_phase import effective_phase

from .enums import NextStep, Reasons, RejectionCode
from .types import AdmissionOutcome, AdmissionRejectedError, PhaseConflictError

E = t.TypeVar("E", bound=AdmissionRejectedError)

PHASE_REJECTIONS: dict[str, tuple[RejectionCode, Reasons, NextStep | None]] = {
    Event.EventStatus.DRAFT: (
        RejectionCode.EVENT_NOT_PUBLISHED,
        Reasons.EVENT_NOT_PUBLISHED,
        NextStep.WAIT_FOR_EVENT_TO_OPEN,
    ),
    Event.EventStatus.CANCELLED: (RejectionCode.EVENT_CANCELLED, Reasons.EVENT_CANCELLED, None),
    Event.EventStatus.CLOSED: (RejectionCode.RSVP_DEADLINE_PASSED, Reasons.RSVP_DEADLINE_PASSED, None),
    Event.EventStatus.ONGOING: (RejectionCode.EVENT_ONGOING, Reasons.EVENT_ONGOING, None),
    Event.EventStatus.COMPLETED: (RejectionCode.EVENT_COMPLETED, Reasons.EVENT_COMPLETED, None),
}


def lock_event(event: Event) -> Event:
    """Re-read the event under a row lock, serialising writers for this event."""
    return Event.objects.select_for_update().get(pk=event.pk)


def confirmed_count(event: Event) -> int:
    """Number of YES records for the event, from committed state."""
    return EventRSVP.objects.confirmed().filter(event=event).count()


def is_full(event: Event) -> bool:
    """Whether the event has a capacity and it is used up."""
    return event.max_attendees is not None and confirmed_count(event) >= event.max_attendees


def reject(
    error_class: type[E],
    event: Event,
    code: RejectionCode,
    reason: Reasons,
    *,
    next_step: NextStep | None = None,
    phase: str | None = None,
) -> E:
    """Build a rejection carrying a translated reason and its outcome."""
    message = _(reason)
    return error_class(
        message,
        AdmissionOutcome(
            allowed=False,
            event_id=event.pk,
            code=code,
            category=error_class.category,
            reason=message,
            next_step=next_step,
            effective_phase=phase,
        ),
    )


def assert_accepting_rsvps(event: Event, now: datetime) -> None:
    """Raise a PhaseConflictError naming the phase unless the event is published."""
    phase = effective_phase(event, now)
    if phase == Event.EventStatus.PUBLISHED:
        return
    code, reason, next_step = PHASE_REJECTIONS[phase]
    raise reject(PhaseConflictError, event, code, reason, next_step=next_step, phase=phase)


def upsert_confirmed(event: Event, user: TurnstileUser) -> EventRSVP:
    """Create or flip the person's attendance record to YES."""
    rsvp, _created = EventRSVP.objects.update_or_create(
        event=event,
        user=user,
        defaults={"status": EventRSVP.RsvpStatus.YES},
    )
    return rsvp
