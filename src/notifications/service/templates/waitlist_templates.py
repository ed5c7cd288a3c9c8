"""Templates for waitlist-related notifications."""

from datetime import datetime

from django.utils.translation import gettext as _
from django.utils.translation import ngettext

from notifications.enums import NotificationType
from notifications.models import Notification
from notifications.service.templates.base import NotificationTemplate
from notifications.service.templates.registry import register_template


class WaitlistSpotAvailableTemplate(NotificationTemplate):
    """Template for WAITLIST_SPOT_AVAILABLE notification."""

    def get_in_app_title(self, notification: Notification) -> str:
        """Get title for in-app display."""
        event_name = notification.context.get("event_name", "")
        return _("Spot available for %(event)s!") % {"event": event_name}

    def get_in_app_body(self, notification: Notification) -> str:
        """Get markdown body for in-app display."""
        context = notification.context
        hours = context.get("offer_window_hours", 24)
        window = ngettext("%(hours)d hour", "%(hours)d hours", hours) % {"hours": hours}
        expires_at = datetime.fromisoformat(context["offer_expires_at"]).strftime("%Y-%m-%d %H:%M %Z").strip()
        body = _(
            'A spot has opened up for "%(event)s"! You have %(window)s to confirm your attendance '
            "(until %(expires_at)s)."
        ) % {"event": context.get("event_name", ""), "window": window, "expires_at": expires_at}
        if event_url := context.get("event_url"):
            body += "\n\n" + _("[Confirm your spot](%(url)s)") % {"url": event_url}
        return body


register_template(NotificationType.WAITLIST_SPOT_AVAILABLE, WaitlistSpotAvailableTemplate())
