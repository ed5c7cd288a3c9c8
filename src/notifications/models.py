"""Models for the notification system."""

from django.conf import settings
from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel
from notifications.enums import NotificationType


class Notification(TimeStampedModel):
    """Core notification record - channel agnostic.

    All contextual information (event, waitlist entry, etc.) is stored in the
    structured context JSON field. Only the user FK is kept for efficient querying.
    Delivery beyond this record belongs to the delivery subsystem.
    """

    notification_type = models.CharField(
        max_length=50,
        db_index=True,
        choices=NotificationType.choices,
        help_text="Type of notification (StrEnum value)",
    )

    title = models.CharField(max_length=255, blank=True, default="", help_text="Rendered notification title")
    body = models.TextField(blank=True, default="", help_text="Rendered notification body (markdown)")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications", db_index=True
    )

    context = models.JSONField(default=dict, help_text="Structured context data (validated TypedDict)")

    dispatched_at = models.DateTimeField(null=True, blank=True, help_text="When the dispatcher handed it off")
    read_at = models.DateTimeField(
        null=True, blank=True, db_index=True, help_text="When user marked notification as read"
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "notification_type", "created_at"], name="idx_notif_user_type_created"),
            models.Index(fields=["user", "read_at"], name="idx_notif_user_read"),  # Unread notifications query
        ]
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"

    def __str__(self) -> str:
        return f"{self.notification_type} for user {self.user_id} at {self.created_at}"

    def mark_read(self) -> None:
        """Mark notification as read."""
        if not self.read_at:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at"])

    @property
    def is_read(self) -> bool:
        """Check if notification has been read."""
        return self.read_at is not None
