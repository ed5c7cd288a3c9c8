"""ConfirmationTransaction: turns a waitlist offer into a YES record."""

import structlog
from django.db import transaction
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList

from .enums import NextStep, Reasons, RejectionCode
from .guards import assert_accepting_rsvps, is_full, lock_event, reject, upsert_confirmed
from .promotion import PromotionEngine
from .types import AdmissionIntegrityError, CapacityRaceError, OfferStateError, PreconditionViolationError

logger = structlog.get_logger(__name__)


class ConfirmationTransaction:
    """Accepts a pending waitlist offer.

    Writing the YES record and removing the waitlist entry happen in one
    transaction; either both are visible or neither is.
    """

    def __init__(self, user: TurnstileUser, event: Event) -> None:
        """Initialize the confirmation for a user and event."""
        self.user = user
        self.event = event

    def confirm(self) -> EventRSVP:
        """Confirm the user's offer.

        Raises:
            PhaseConflictError: the event is not published.
            PreconditionViolationError: the user is not on the waitlist.
            OfferStateError: no offer was made, or it lapsed. A lapsed offer also
                removes the entry and promotes the next person.
            CapacityRaceError: the spot was taken; the entry stays queued.
            AdmissionIntegrityError: the confirm step was only partially applied.
        """
        with transaction.atomic():
            now = timezone.now()
            event = lock_event(self.event)
            assert_accepting_rsvps(event, now)

            entry = EventWaitList.objects.filter(event=event, user=self.user).first()
            if entry is None:
                raise reject(
                    PreconditionViolationError,
                    event,
                    RejectionCode.NOT_ON_WAITLIST,
                    Reasons.NOT_ON_WAITLIST,
                    next_step=NextStep.JOIN_WAITLIST,
                )
            if not entry.has_offer:
                raise reject(
                    OfferStateError,
                    event,
                    RejectionCode.NOT_NOTIFIED,
                    Reasons.NOT_NOTIFIED,
                    next_step=NextStep.WAIT_FOR_OFFER,
                )

            if entry.offer_expired(now):
                entry.delete()
                logger.info(
                    "waitlist_offer_expired",
                    event_id=str(event.id),
                    user_id=str(self.user.id),
                    offer_expires_at=entry.offer_expires_at.isoformat() if entry.offer_expires_at else None,
                )
                PromotionEngine(event).promote_next()
                expired = True
            else:
                expired = False
                rsvp = self._admit(event, entry)

        # Raised outside the atomic block so the removal and the next offer commit.
        if expired:
            raise reject(
                OfferStateError,
                event,
                RejectionCode.CONFIRMATION_EXPIRED,
                Reasons.CONFIRMATION_EXPIRED,
                next_step=NextStep.JOIN_WAITLIST,
            )
        return rsvp

    def _admit(self, event: Event, entry: EventWaitList) -> EventRSVP:
        if is_full(event):
            raise reject(
                CapacityRaceError,
                event,
                RejectionCode.SPOT_FILLED,
                Reasons.SPOT_FILLED,
                next_step=NextStep.WAIT_FOR_OFFER,
            )

        rsvp = upsert_confirmed(event, self.user)
        deleted, _ = EventWaitList.objects.filter(pk=entry.pk).delete()

        confirmed = EventRSVP.objects.confirmed().filter(event=event, user=self.user).exists()
        if deleted != 1 or not confirmed:
            logger.error(
                "waitlist_confirmation_partial",
                event_id=str(event.id),
                user_id=str(self.user.id),
                entries_deleted=deleted,
                confirmed=confirmed,
            )
            raise AdmissionIntegrityError(
                f"Confirmation for user {self.user.id} on event {event.id} was only partially applied."
            )

        logger.info("waitlist_confirmed", event_id=str(event.id), user_id=str(self.user.id))
        return rsvp
