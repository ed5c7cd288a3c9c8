"""PromotionEngine: offers a freed spot to the head of the waitlist."""

from datetime import datetime, timedelta

import structlog
from django.conf import settings
from django.db import transaction
from django.utils import timezone

from events.models import Event, EventWaitList
from notifications.enums import NotificationType
from notifications.signals import notification_requested

from .guards import lock_event

logger = structlog.get_logger(__name__)


class PromotionEngine:
    """Marks the earliest eligible waitlist entry as offered.

    An entry is eligible when it was never offered a spot, or when its previous
    offer lapsed. A lapsed entry keeps its queue position and can be offered again.
    Nothing is reserved: the offer only invites the person to confirm.
    """

    def __init__(self, event: Event) -> None:
        """Initialize the engine for an event."""
        self.event = event

    @property
    def offer_window(self) -> timedelta:
        """How long an offer stays open."""
        return timedelta(hours=settings.WAITLIST_OFFER_WINDOW_HOURS)

    @transaction.atomic
    def promote_next(self) -> EventWaitList | None:
        """Offer the spot to the next eligible entry.

        The offer is written with a conditional update, so an entry claimed by a
        concurrent promotion is skipped and the next candidate is tried.

        Returns:
            The offered entry, or None when nobody is eligible.
        """
        now = timezone.now()
        event = lock_event(self.event)
        expires_at = now + self.offer_window

        for attempt in range(settings.WAITLIST_PROMOTION_MAX_ATTEMPTS):
            candidate = (
                EventWaitList.objects.filter(event=event).eligible_for_offer(now).fifo().select_related("user").first()
            )
            if candidate is None:
                logger.debug("waitlist_no_eligible_entry", event_id=str(event.id))
                return None

            updated = (
                EventWaitList.objects.filter(pk=candidate.pk)
                .eligible_for_offer(now)
                .update(offered_at=now, offer_expires_at=expires_at, updated_at=now)
            )
            if not updated:
                logger.info(
                    "waitlist_offer_conflict",
                    event_id=str(event.id),
                    entry_id=str(candidate.id),
                    attempt=attempt + 1,
                )
                continue

            candidate.offered_at = now
            candidate.offer_expires_at = expires_at
            transaction.on_commit(lambda: self._notify(event, candidate, expires_at))

            logger.info(
                "waitlist_offer_created",
                event_id=str(event.id),
                entry_id=str(candidate.id),
                user_id=str(candidate.user_id),
                offer_expires_at=expires_at.isoformat(),
            )
            return candidate

        logger.warning(
            "waitlist_promotion_gave_up",
            event_id=str(event.id),
            attempts=settings.WAITLIST_PROMOTION_MAX_ATTEMPTS,
        )
        return None

    def _notify(self, event: Event, entry: EventWaitList, expires_at: datetime) -> None:
        notification_requested.send(
            sender=EventWaitList,
            notification_type=NotificationType.WAITLIST_SPOT_AVAILABLE,
            user=entry.user,
            context={
                "waitlist_entry_id": str(entry.id),
                "event_id": str(event.id),
                "event_name": event.name,
                "event_start": event.start.isoformat(),
                "offer_expires_at": expires_at.isoformat(),
                "offer_window_hours": settings.WAITLIST_OFFER_WINDOW_HOURS,
                "event_url": f"{settings.FRONTEND_BASE_URL}/events/{event.id}",
            },
        )
