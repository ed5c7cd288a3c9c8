"""Base template interface for notifications."""

from abc import ABC, abstractmethod

from notifications.models import Notification


class NotificationTemplate(ABC):
    """Base class for notification templates.

    Each notification type renders an in-app title and a markdown body from the
    notification's structured context. Channel-specific rendering (email, SMS, ...)
    belongs to the delivery subsystem.
    """

    @abstractmethod
    def get_in_app_title(self, notification: Notification) -> str:
        """Get title for in-app display."""

    @abstractmethod
    def get_in_app_body(self, notification: Notification) -> str:
        """Get markdown body for in-app display."""
