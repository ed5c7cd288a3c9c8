"""Context schemas for notifications using TypedDict for type safety.

Each notification type has a corresponding context schema that defines
the structure of the context data.
"""

import typing as t

from notifications.enums import NotificationType


class BaseNotificationContext(t.TypedDict, total=False):
    """Base context for all notifications."""

    # Frontend URL for deep linking
    frontend_url: str


class WaitlistSpotAvailableContext(BaseNotificationContext):
    """Context for WAITLIST_SPOT_AVAILABLE notification."""

    waitlist_entry_id: t.Required[str]
    event_id: t.Required[str]
    event_name: t.Required[str]
    event_start: t.Required[str]  # ISO format
    offer_expires_at: t.Required[str]  # ISO format
    offer_window_hours: t.Required[int]
    event_url: str


NOTIFICATION_CONTEXT_SCHEMAS: dict[NotificationType, type[BaseNotificationContext]] = {
    NotificationType.WAITLIST_SPOT_AVAILABLE: WaitlistSpotAvailableContext,
}


def validate_notification_context(notification_type: NotificationType, context: dict[str, t.Any]) -> None:
    """Validate that context matches expected schema for notification type.

    Raises:
        ValueError: If context is invalid or notification type has no schema
    """
    schema = NOTIFICATION_CONTEXT_SCHEMAS.get(notification_type)
    if schema is None:
        raise ValueError(f"No schema defined for notification type: {notification_type}")

    # TypedDict validation happens at type-check time with mypy
    # At runtime, we do basic key validation for required fields
    required_keys: frozenset[str] = getattr(schema, "__required_keys__", frozenset())
    missing_keys = required_keys - context.keys()

    if missing_keys:
        raise ValueError(f"Missing required context keys for {notification_type}: {missing_keys}")
