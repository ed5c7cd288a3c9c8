import typing as t

from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel


class EventQuerySet(models.QuerySet["Event"]):
    def with_capacity(self) -> t.Self:
        """Only events with a bounded number of attendees."""
        return self.filter(max_attendees__isnull=False)

    def with_open_waitlist(self) -> t.Self:
        """Only events that accept waitlist entries."""
        return self.with_capacity().filter(waitlist_open=True)

    def pending_completion(self) -> t.Self:
        """Events whose stored status may still have to be persisted as completed."""
        return self.exclude(
            status__in=[Event.EventStatus.DRAFT, Event.EventStatus.CANCELLED, Event.EventStatus.COMPLETED]
        )


class EventManager(models.Manager["Event"]):
    def get_queryset(self) -> EventQuerySet:
        """Get base queryset."""
        return EventQuerySet(self.model, using=self._db)

    def with_open_waitlist(self) -> EventQuerySet:
        """Returns events with a capacity and an open waitlist."""
        return self.get_queryset().with_open_waitlist()

    def pending_completion(self) -> EventQuerySet:
        """Returns events that are candidates for the completed write-back."""
        return self.get_queryset().pending_completion()


class Event(TimeStampedModel):
    class EventStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"
        CLOSED = "closed", "RSVPs Closed"
        ONGOING = "ongoing", "In Progress"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    name = models.CharField(max_length=255, db_index=True)
    status = models.CharField(choices=EventStatus.choices, max_length=10, default=EventStatus.DRAFT, db_index=True)
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(null=True, blank=True, db_index=True)
    rsvp_before = models.DateTimeField(null=True, blank=True, db_index=True, help_text="RSVP deadline")
    max_attendees = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Maximum number of confirmed attendees. Leave empty for unlimited.",
    )
    waitlist_open = models.BooleanField(default=False)

    objects = EventManager()

    class Meta:
        indexes = [
            models.Index(fields=["status", "start"], name="idx_status_start"),
        ]
        ordering = ["start"]

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
