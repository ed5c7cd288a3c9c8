"""Enums for the notification system."""

from django.db.models import TextChoices


class NotificationType(TextChoices):
    """All notification types in the system."""

    # Waitlist notifications
    WAITLIST_SPOT_AVAILABLE = "waitlist_spot_available"
