"""Core notification dispatcher service."""

import typing as t

import structlog

from accounts.models import TurnstileUser
from notifications.enums import NotificationType
from notifications.models import Notification

logger = structlog.get_logger(__name__)


def create_notification(
    notification_type: NotificationType | str,
    user: TurnstileUser,
    context: dict[str, t.Any],
) -> Notification:
    """Create a notification record.

    Args:
        notification_type: Type of notification
        user: User to notify
        context: Notification context data

    Returns:
        Created Notification instance

    Raises:
        ValueError: If context validation fails
    """
    from notifications.context_schemas import validate_notification_context

    if isinstance(notification_type, str):
        notification_type = NotificationType(notification_type)

    validate_notification_context(notification_type, context)

    # Title/body are rendered by the dispatcher task
    notification = Notification.objects.create(
        notification_type=notification_type,
        user=user,
        context=context,
        title="",
        body="",
    )

    logger.info(
        "notification_created",
        notification_id=str(notification.id),
        notification_type=notification_type,
        user_id=str(user.id),
    )

    return notification
