"""Notification signals.

Domain code requests notifications by sending ``notification_requested``;
the handler in ``notifications.service.signal_handlers`` records and dispatches them.
"""

from django.dispatch import Signal

# Signal for requesting notification dispatch
# Expected kwargs:
#   - notification_type: NotificationType enum value
#   - user: TurnstileUser instance
#   - context: dict matching the notification type's context schema
notification_requested = Signal()

__all__ = ["notification_requested"]
