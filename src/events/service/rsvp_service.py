"""Attendance answers (yes / no / maybe) for an event.

A YES always goes through :class:`AdmissionController`. Any change that frees a
confirmed spot emits ``attendance_vacated`` once the transaction commits.
"""

import structlog
from django.db import transaction
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP
from events.service.admission import AdmissionController
from events.service.admission.guards import assert_accepting_rsvps, lock_event
from events.signals import attendance_vacated

logger = structlog.get_logger(__name__)


def _vacated_on_commit(event: Event, user: TurnstileUser) -> None:
    transaction.on_commit(
        lambda: attendance_vacated.send(sender=EventRSVP, event_id=event.id, user_id=user.id)
    )


@transaction.atomic
def update_rsvp(event: Event, user: TurnstileUser, status: EventRSVP.RsvpStatus | str) -> EventRSVP:
    """Record the user's answer.

    Raises:
        AdmissionRejectedError: when the answer is YES and admission is refused,
            or when the event is not accepting answers.
    """
    if status == EventRSVP.RsvpStatus.YES:
        return AdmissionController(user, event).request_admission()

    locked = lock_event(event)
    assert_accepting_rsvps(locked, timezone.now())

    previous = EventRSVP.objects.filter(event=locked, user=user).values_list("status", flat=True).first()
    rsvp, _created = EventRSVP.objects.update_or_create(event=locked, user=user, defaults={"status": status})

    if previous == EventRSVP.RsvpStatus.YES:
        logger.info("attendance_downgraded", event_id=str(locked.id), user_id=str(user.id), status=status)
        _vacated_on_commit(locked, user)
    return rsvp


@transaction.atomic
def remove_rsvp(event: Event, user: TurnstileUser) -> bool:
    """Delete the user's answer. Returns whether one existed.

    Raises:
        PhaseConflictError: the event is not accepting answers.
    """
    locked = lock_event(event)
    assert_accepting_rsvps(locked, timezone.now())
    rsvp = EventRSVP.objects.filter(event=locked, user=user).first()
    if rsvp is None:
        return False

    was_confirmed = rsvp.status == EventRSVP.RsvpStatus.YES
    rsvp.delete()
    logger.info("rsvp_removed", event_id=str(locked.id), user_id=str(user.id), was_confirmed=was_confirmed)
    if was_confirmed:
        _vacated_on_commit(locked, user)
    return True
