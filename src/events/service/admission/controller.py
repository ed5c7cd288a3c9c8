"""AdmissionController: direct admission of a YES response."""

import structlog
from django.db import transaction
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList

from .enums import NextStep, Reasons, RejectionCode
from .guards import assert_accepting_rsvps, confirmed_count, lock_event, reject, upsert_confirmed
from .types import CapacityError, CapacityRaceError, PreconditionViolationError

logger = structlog.get_logger(__name__)


class AdmissionController:
    """Decides whether a YES response is admitted, must queue, or is rejected.

    Queuing is a separate call on purpose: a full event with an open waitlist
    rejects with ``EVENT_AT_CAPACITY_WAITLIST_AVAILABLE`` and the caller decides
    whether to call ``WaitlistQueue.join``.
    """

    def __init__(self, user: TurnstileUser, event: Event) -> None:
        """Initialize the controller."""
        self.user = user
        self.event = event

    @transaction.atomic
    def request_admission(self) -> EventRSVP:
        """Admit the user to the event.

        Returns:
            The user's YES record.

        Raises:
            PhaseConflictError: the event is not published.
            PreconditionViolationError: the user is on the waitlist.
            CapacityError: the event is full.
            CapacityRaceError: a concurrent admission consumed the last spot.
        """
        now = timezone.now()
        event = lock_event(self.event)
        assert_accepting_rsvps(event, now)

        existing = EventRSVP.objects.filter(event=event, user=self.user).first()
        if existing is not None and existing.status == EventRSVP.RsvpStatus.YES:
            return existing

        entry = EventWaitList.objects.filter(event=event, user=self.user).first()
        if entry is not None:
            raise reject(
                PreconditionViolationError,
                event,
                RejectionCode.ALREADY_ON_WAITLIST,
                Reasons.ALREADY_ON_WAITLIST,
                next_step=NextStep.CONFIRM_OFFER if entry.has_offer else NextStep.WAIT_FOR_OFFER,
            )

        if event.max_attendees is not None and confirmed_count(event) >= event.max_attendees:
            raise self._full(event, CapacityError)

        rsvp = upsert_confirmed(event, self.user)

        # Post-write invariant: a capacity-bounded event is never overbooked.
        if event.max_attendees is not None and confirmed_count(event) > event.max_attendees:
            logger.warning(
                "admission_capacity_race_detected",
                event_id=str(event.id),
                user_id=str(self.user.id),
                max_attendees=event.max_attendees,
            )
            raise self._full(event, CapacityRaceError)

        logger.info("admission_granted", event_id=str(event.id), user_id=str(self.user.id))
        return rsvp

    @staticmethod
    def _full(event: Event, error_class: type[CapacityError] | type[CapacityRaceError]) -> Exception:
        if event.waitlist_open:
            return reject(
                error_class,
                event,
                RejectionCode.EVENT_AT_CAPACITY_WAITLIST_AVAILABLE,
                Reasons.EVENT_AT_CAPACITY_WAITLIST_AVAILABLE,
                next_step=NextStep.JOIN_WAITLIST,
            )
        return reject(error_class, event, RejectionCode.EVENT_AT_CAPACITY, Reasons.EVENT_AT_CAPACITY)
