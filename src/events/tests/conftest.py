import typing as t
from datetime import datetime, timedelta

import pytest
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList


@pytest.fixture
def event(next_week: datetime) -> Event:
    """A published event with two spots and an open waitlist."""
    return Event.objects.create(
        name="Event",
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        end=next_week + timedelta(hours=2),
        max_attendees=2,
        waitlist_open=True,
    )


@pytest.fixture
def unlimited_event(next_week: datetime) -> Event:
    return Event.objects.create(name="Open House", status=Event.EventStatus.PUBLISHED, start=next_week)


@pytest.fixture
def attendees(user_factory: t.Callable[..., TurnstileUser]) -> list[TurnstileUser]:
    return [user_factory() for _ in range(2)]


@pytest.fixture
def full_event(event: Event, attendees: list[TurnstileUser]) -> Event:
    """The event with both spots taken."""
    for attendee in attendees:
        EventRSVP.objects.create(event=event, user=attendee, status=EventRSVP.RsvpStatus.YES)
    return event


@pytest.fixture
def enqueue() -> t.Callable[..., EventWaitList]:
    """Put a user on the waitlist with a controlled join time."""

    def _enqueue(event: Event, user: TurnstileUser, minutes_ago: int = 0, **kwargs: t.Any) -> EventWaitList:
        entry = EventWaitList.objects.create(event=event, user=user, **kwargs)
        created_at = timezone.now() - timedelta(minutes=minutes_ago)
        EventWaitList.objects.filter(pk=entry.pk).update(created_at=created_at)
        entry.refresh_from_db()
        return entry

    return _enqueue
