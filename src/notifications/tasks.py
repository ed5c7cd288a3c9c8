"""Celery tasks for notification dispatch."""

import typing as t

import structlog
from celery import shared_task
from django.conf import settings
from django.utils import timezone, translation

from notifications.models import Notification

logger = structlog.get_logger(__name__)


@shared_task(bind=True, max_retries=3)
def dispatch_notification(self: t.Any, notification_id: str) -> dict[str, t.Any]:
    """Render a notification in the recipient's language and hand it to delivery.

    Args:
        self: Celery task instance (automatically passed when bind=True)
        notification_id: UUID of notification to dispatch

    Returns:
        Dict with dispatch stats
    """
    notification = Notification.objects.select_related("user").get(pk=notification_id)

    if notification.dispatched_at is not None:
        logger.info("notification_already_dispatched", notification_id=notification_id)
        return {"notification_id": notification_id, "dispatched": False}

    user_language = getattr(notification.user, "language", settings.LANGUAGE_CODE)

    try:
        from notifications.service.templates.registry import get_template

        template = get_template(notification.notification_type)

        # Activate the recipient's language, not the system default
        with translation.override(user_language):
            notification.title = template.get_in_app_title(notification)
            notification.body = template.get_in_app_body(notification)
    except Exception as e:
        logger.error(
            "notification_render_failed",
            notification_id=notification_id,
            notification_type=notification.notification_type,
            error=str(e),
        )
        # Continue even if rendering fails - delivery can use context directly

    notification.dispatched_at = timezone.now()
    notification.save(update_fields=["title", "body", "dispatched_at", "updated_at"])

    logger.info(
        "notification_dispatched",
        notification_id=notification_id,
        notification_type=notification.notification_type,
        user_language=user_language,
    )
    return {"notification_id": notification_id, "dispatched": True}
