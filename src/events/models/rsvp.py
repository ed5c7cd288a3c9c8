import typing as t

from django.conf import settings
from django.db import models

from common.models import TimeStampedModel


class EventRSVPQuerySet(models.QuerySet["EventRSVP"]):
    """Custom queryset for EventRSVP model."""

    def confirmed(self) -> t.Self:
        """Only YES answers."""
        return self.filter(status=EventRSVP.RsvpStatus.YES)


class EventRSVPManager(models.Manager["EventRSVP"]):
    """Custom manager for EventRSVP."""

    def get_queryset(self) -> EventRSVPQuerySet:
        """Get base queryset."""
        return EventRSVPQuerySet(self.model, using=self._db)

    def confirmed(self) -> EventRSVPQuerySet:
        """Returns a queryset of confirmed attendance records."""
        return self.get_queryset().confirmed()


class EventRSVP(TimeStampedModel):
    class RsvpStatus(models.TextChoices):
        YES = "yes", "Yes"
        NO = "no", "No"
        MAYBE = "maybe", "Maybe"

    event = models.ForeignKey("events.Event", on_delete=models.CASCADE, related_name="rsvps")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="rsvps")
    status = models.CharField(max_length=20, choices=RsvpStatus.choices, db_index=True)

    objects = EventRSVPManager()

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                name="unique_event_user",
            )
        ]

    def __str__(self) -> str:
        return f"RSVP: {self.user_id} -> {self.event_id} ({self.status})"
