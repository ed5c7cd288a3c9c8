"""Shared fixtures for notification tests."""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import TurnstileUser
from notifications.enums import NotificationType
from notifications.models import Notification


@pytest.fixture
def spot_context() -> dict[str, object]:
    """A complete WAITLIST_SPOT_AVAILABLE context."""
    now = timezone.now()
    return {
        "waitlist_entry_id": str(uuid.uuid4()),
        "event_id": str(uuid.uuid4()),
        "event_name": "Test Event",
        "event_start": (now + timedelta(days=7)).isoformat(),
        "offer_expires_at": (now + timedelta(hours=24)).isoformat(),
        "offer_window_hours": 24,
        "event_url": "http://localhost:5173/events/test",
    }


@pytest.fixture
def notification(user: TurnstileUser, spot_context: dict[str, object]) -> Notification:
    """A sample notification."""
    from notifications.service.dispatcher import create_notification

    return create_notification(
        notification_type=NotificationType.WAITLIST_SPOT_AVAILABLE,
        user=user,
        context=spot_context,
    )
