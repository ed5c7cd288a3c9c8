"""WaitlistQueue: joining, leaving and ranking an event's waitlist."""

import structlog
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList
from events.models.waitlist import EventWaitListQuerySet

from .enums import NextStep, Reasons, RejectionCode
from .guards import assert_accepting_rsvps, confirmed_count, lock_event, reject
from .types import CapacityError, PreconditionViolationError, WaitlistStatus

logger = structlog.get_logger(__name__)


class WaitlistQueue:
    """FIFO waitlist for a single event.

    Order is by ``created_at`` with the entry id as tie-breaker. Positions are
    always recomputed from committed rows and never cached.
    """

    def __init__(self, event: Event) -> None:
        """Initialize the queue for an event."""
        self.event = event

    @transaction.atomic
    def join(self, user: TurnstileUser) -> EventWaitList:
        """Add the user to the waitlist.

        Preconditions are checked in this order: event published, waitlist open,
        capacity set, user not confirmed, user not queued, event full.

        Raises:
            PhaseConflictError
            PreconditionViolationError
            CapacityError: the event still has room, use direct admission.
        """
        now = timezone.now()
        event = lock_event(self.event)
        assert_accepting_rsvps(event, now)

        if not event.waitlist_open:
            raise reject(
                PreconditionViolationError, event, RejectionCode.WAITLIST_NOT_ENABLED, Reasons.WAITLIST_NOT_ENABLED
            )
        if event.max_attendees is None:
            raise reject(
                PreconditionViolationError,
                event,
                RejectionCode.NO_CAPACITY_LIMIT,
                Reasons.NO_CAPACITY_LIMIT,
                next_step=NextStep.RSVP,
            )
        if EventRSVP.objects.confirmed().filter(event=event, user=user).exists():
            raise reject(PreconditionViolationError, event, RejectionCode.ALREADY_RSVPD, Reasons.ALREADY_RSVPD)
        if EventWaitList.objects.filter(event=event, user=user).exists():
            raise self._already_queued(event)
        if confirmed_count(event) < event.max_attendees:
            raise reject(
                CapacityError,
                event,
                RejectionCode.EVENT_NOT_AT_CAPACITY,
                Reasons.EVENT_NOT_AT_CAPACITY,
                next_step=NextStep.RSVP,
            )

        try:
            with transaction.atomic():
                entry = EventWaitList.objects.create(event=event, user=user)
        except (IntegrityError, DjangoValidationError):
            # Unique (event, user) constraint: a concurrent join won.
            raise self._already_queued(event)

        logger.info("waitlist_joined", event_id=str(event.id), user_id=str(user.id), entry_id=str(entry.id))
        return entry

    @transaction.atomic
    def leave(self, user: TurnstileUser) -> bool:
        """Remove the user's entry if present. Returns whether one was removed.

        Runs under the event lock so it cannot interleave with a confirmation.
        A queued person never held a spot, so leaving does not promote anyone.
        """
        event = lock_event(self.event)
        deleted, _ = EventWaitList.objects.filter(event=event, user=user).delete()
        if deleted:
            logger.info("waitlist_left", event_id=str(event.id), user_id=str(user.id))
        return bool(deleted)

    def position(self, user: TurnstileUser) -> int | None:
        """1-based rank of the user's entry, or None when not queued."""
        entry = EventWaitList.objects.filter(event=self.event, user=user).first()
        if entry is None:
            return None
        return self.rank(entry)

    @staticmethod
    def rank(entry: EventWaitList) -> int:
        """1 + number of entries for the same event ahead of ``entry``."""
        ahead = (
            EventWaitList.objects.filter(event_id=entry.event_id)
            .filter(Q(created_at__lt=entry.created_at) | Q(created_at=entry.created_at, id__lt=entry.id))
            .count()
        )
        return ahead + 1

    def entries(self) -> EventWaitListQuerySet:
        """All entries for the event in queue order."""
        return EventWaitList.objects.filter(event=self.event).select_related("user").fifo()

    def status(self, user: TurnstileUser) -> WaitlistStatus:
        """The user's waitlist standing, including any pending offer."""
        entry = EventWaitList.objects.filter(event=self.event, user=user).first()
        if entry is None:
            return WaitlistStatus(
                event_id=self.event.id,
                on_waitlist=False,
                waitlist_open=self.event.waitlist_open,
                max_attendees=self.event.max_attendees,
            )

        now = timezone.now()
        return WaitlistStatus(
            event_id=self.event.id,
            on_waitlist=True,
            waitlist_open=self.event.waitlist_open,
            max_attendees=self.event.max_attendees,
            position=self.rank(entry),
            total_waitlist=EventWaitList.objects.filter(event=self.event).count(),
            created_at=entry.created_at,
            offered_at=entry.offered_at,
            offer_expires_at=entry.offer_expires_at,
            offer_active=entry.has_offer and not entry.offer_expired(now),
        )

    @staticmethod
    def _already_queued(event: Event) -> PreconditionViolationError:
        return reject(
            PreconditionViolationError,
            event,
            RejectionCode.ALREADY_ON_WAITLIST,
            Reasons.ALREADY_ON_WAITLIST,
            next_step=NextStep.WAIT_FOR_OFFER,
        )
