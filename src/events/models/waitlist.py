import typing as t
from datetime import datetime

from django.conf import settings
from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel


class EventWaitListQuerySet(models.QuerySet["EventWaitList"]):
    def fifo(self) -> t.Self:
        """Order by join time, ties broken by primary key."""
        return self.order_by("created_at", "id")

    def eligible_for_offer(self, now: datetime) -> t.Self:
        """Entries never offered a spot, or whose previous offer has lapsed."""
        return self.filter(Q(offered_at__isnull=True) | Q(offer_expires_at__lt=now))


class EventWaitListManager(models.Manager["EventWaitList"]):
    def get_queryset(self) -> EventWaitListQuerySet:
        """Get base queryset."""
        return EventWaitListQuerySet(self.model, using=self._db)

    def fifo(self) -> EventWaitListQuerySet:
        """Returns entries in queue order."""
        return self.get_queryset().fifo()


class EventWaitList(TimeStampedModel):
    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="waitlist_entries")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="waitlist_entries")
    offered_at = models.DateTimeField(null=True, blank=True, help_text="When a freed spot was offered")
    offer_expires_at = models.DateTimeField(null=True, blank=True, help_text="When the current offer lapses")

    objects = EventWaitListManager()

    class Meta:
        constraints = [models.UniqueConstraint(fields=["event", "user"], name="unique_event_waitlist")]
        indexes = [models.Index(fields=["event", "created_at"], name="idx_waitlist_event_created")]
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"Waitlist: {self.user_id} -> {self.event_id}"

    @property
    def has_offer(self) -> bool:
        """Whether a spot has been offered to this entry."""
        return self.offered_at is not None

    def offer_expired(self, now: datetime) -> bool:
        """Whether the recorded offer lapsed before ``now``."""
        return self.offer_expires_at is not None and self.offer_expires_at < now
