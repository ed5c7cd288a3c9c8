"""Tests for WaitlistQueue: join, leave, position and status."""

import typing as t
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import IntegrityError
from django.utils import timezone

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList
from events.service.admission import (
    CapacityError,
    NextStep,
    PhaseConflictError,
    PreconditionViolationError,
    RejectionCode,
    WaitlistQueue,
)
from events.service.admission.guards import lock_event

pytestmark = pytest.mark.django_db


class TestJoin:
    def test_join_full_event(self, user: TurnstileUser, full_event: Event) -> None:
        entry = WaitlistQueue(full_event).join(user)

        assert entry.event_id == full_event.id
        assert entry.offered_at is None
        assert WaitlistQueue(full_event).position(user) == 1

    def test_cancelled_event(self, user: TurnstileUser, full_event: Event) -> None:
        full_event.status = Event.EventStatus.CANCELLED
        full_event.save()

        with pytest.raises(PhaseConflictError) as exc_info:
            WaitlistQueue(full_event).join(user)

        assert exc_info.value.code == RejectionCode.EVENT_CANCELLED

    def test_waitlist_disabled(self, user: TurnstileUser, full_event: Event) -> None:
        full_event.waitlist_open = False
        full_event.save()

        with pytest.raises(PreconditionViolationError) as exc_info:
            WaitlistQueue(full_event).join(user)

        assert exc_info.value.code == RejectionCode.WAITLIST_NOT_ENABLED

    def test_no_capacity_limit(self, user: TurnstileUser, unlimited_event: Event) -> None:
        unlimited_event.waitlist_open = True
        unlimited_event.save()

        with pytest.raises(PreconditionViolationError) as exc_info:
            WaitlistQueue(unlimited_event).join(user)

        assert exc_info.value.code == RejectionCode.NO_CAPACITY_LIMIT
        assert exc_info.value.outcome.next_step == NextStep.RSVP

    def test_already_confirmed(self, full_event: Event) -> None:
        confirmed = EventRSVP.objects.confirmed().filter(event=full_event).first()
        assert confirmed is not None

        with pytest.raises(PreconditionViolationError) as exc_info:
            WaitlistQueue(full_event).join(confirmed.user)

        assert exc_info.value.code == RejectionCode.ALREADY_RSVPD
        assert not EventWaitList.objects.filter(event=full_event, user=confirmed.user).exists()

    def test_already_queued(self, user: TurnstileUser, full_event: Event) -> None:
        WaitlistQueue(full_event).join(user)

        with pytest.raises(PreconditionViolationError) as exc_info:
            WaitlistQueue(full_event).join(user)

        assert exc_info.value.code == RejectionCode.ALREADY_ON_WAITLIST
        assert EventWaitList.objects.filter(event=full_event, user=user).count() == 1

    def test_not_at_capacity(self, user: TurnstileUser, event: Event) -> None:
        with pytest.raises(CapacityError) as exc_info:
            WaitlistQueue(event).join(user)

        assert exc_info.value.code == RejectionCode.EVENT_NOT_AT_CAPACITY
        assert exc_info.value.outcome.next_step == NextStep.RSVP

    def test_precondition_order_phase_first(self, user: TurnstileUser, unlimited_event: Event) -> None:
        """A draft event without capacity or waitlist reports the phase conflict."""
        unlimited_event.status = Event.EventStatus.DRAFT
        unlimited_event.save()

        with pytest.raises(PhaseConflictError):
            WaitlistQueue(unlimited_event).join(user)

    def test_precondition_order_waitlist_before_capacity(self, user: TurnstileUser, unlimited_event: Event) -> None:
        with pytest.raises(PreconditionViolationError) as exc_info:
            WaitlistQueue(unlimited_event).join(user)

        assert exc_info.value.code == RejectionCode.WAITLIST_NOT_ENABLED

    def test_concurrent_duplicate_maps_to_already_queued(self, user: TurnstileUser, full_event: Event) -> None:
        with patch.object(EventWaitList.objects, "create", side_effect=IntegrityError("duplicate key")):
            with pytest.raises(PreconditionViolationError) as exc_info:
                WaitlistQueue(full_event).join(user)

        assert exc_info.value.code == RejectionCode.ALREADY_ON_WAITLIST


class TestPosition:
    def test_not_queued(self, user: TurnstileUser, event: Event) -> None:
        assert WaitlistQueue(event).position(user) is None

    def test_dense_ranking_in_join_order(
        self,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        people = [user_factory() for _ in range(3)]
        for minutes_ago, person in zip((30, 20, 10), people):
            enqueue(full_event, person, minutes_ago=minutes_ago)

        queue = WaitlistQueue(full_event)
        assert [queue.position(person) for person in people] == [1, 2, 3]

        newcomer = user_factory()
        queue.join(newcomer)
        assert queue.position(newcomer) == 4

    def test_ranking_closes_gaps(
        self,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        first, second, third = (user_factory() for _ in range(3))
        enqueue(full_event, first, minutes_ago=3)
        enqueue(full_event, second, minutes_ago=2)
        enqueue(full_event, third, minutes_ago=1)

        queue = WaitlistQueue(full_event)
        queue.leave(second)

        assert queue.position(first) == 1
        assert queue.position(third) == 2

    def test_ties_break_by_entry_id(
        self,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        a, b = user_factory(), user_factory()
        entry_a = enqueue(full_event, a)
        entry_b = enqueue(full_event, b)
        EventWaitList.objects.filter(pk=entry_b.pk).update(created_at=entry_a.created_at)

        queue = WaitlistQueue(full_event)
        positions = sorted([queue.position(a), queue.position(b)])
        assert positions == [1, 2]

        expected_first = a if entry_a.id < entry_b.id else b
        assert queue.position(expected_first) == 1
        assert list(queue.entries())[0].user_id == expected_first.id

    def test_other_events_do_not_count(
        self,
        user: TurnstileUser,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        next_week: t.Any,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        other = Event.objects.create(
            name="Other", status=Event.EventStatus.PUBLISHED, start=next_week, max_attendees=1, waitlist_open=True
        )
        enqueue(other, user_factory(), minutes_ago=60)
        enqueue(full_event, user)

        assert WaitlistQueue(full_event).position(user) == 1


class TestLeave:
    def test_leave_removes_entry(self, user: TurnstileUser, full_event: Event) -> None:
        WaitlistQueue(full_event).join(user)

        assert WaitlistQueue(full_event).leave(user) is True
        assert not EventWaitList.objects.filter(event=full_event, user=user).exists()

    def test_leave_when_not_queued(self, user: TurnstileUser, event: Event) -> None:
        assert WaitlistQueue(event).leave(user) is False

    def test_leave_never_promotes(
        self,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        leaver, waiting = user_factory(), user_factory()
        enqueue(full_event, leaver, minutes_ago=2)
        enqueue(full_event, waiting, minutes_ago=1)

        with patch("events.service.admission.promotion.PromotionEngine.promote_next") as promote:
            WaitlistQueue(full_event).leave(leaver)

        promote.assert_not_called()
        assert EventWaitList.objects.get(event=full_event, user=waiting).offered_at is None

    def test_leave_takes_the_event_lock(self, user: TurnstileUser, full_event: Event) -> None:
        """Leaving is serialised with confirmation through the event row lock."""
        WaitlistQueue(full_event).join(user)

        with patch("events.service.admission.waitlist.lock_event", wraps=lock_event) as locked:
            assert WaitlistQueue(full_event).leave(user) is True

        locked.assert_called_once_with(full_event)
        assert not EventWaitList.objects.filter(event=full_event, user=user).exists()


class TestStatus:
    def test_not_queued(self, user: TurnstileUser, full_event: Event) -> None:
        status = WaitlistQueue(full_event).status(user)

        assert status.on_waitlist is False
        assert status.waitlist_open is True
        assert status.max_attendees == 2
        assert status.position is None

    def test_queued_with_active_offer(
        self,
        user: TurnstileUser,
        user_factory: t.Callable[..., TurnstileUser],
        full_event: Event,
        enqueue: t.Callable[..., EventWaitList],
    ) -> None:
        now = timezone.now()
        enqueue(full_event, user_factory(), minutes_ago=10)
        enqueue(full_event, user, minutes_ago=5, offered_at=now, offer_expires_at=now + timedelta(hours=24))

        status = WaitlistQueue(full_event).status(user)

        assert status.on_waitlist is True
        assert status.position == 2
        assert status.total_waitlist == 2
        assert status.offer_active is True
        assert status.offer_expires_at is not None

    def test_lapsed_offer_is_not_active(
        self, user: TurnstileUser, full_event: Event, enqueue: t.Callable[..., EventWaitList]
    ) -> None:
        past = timezone.now() - timedelta(hours=30)
        enqueue(full_event, user, offered_at=past, offer_expires_at=past + timedelta(hours=24))

        status = WaitlistQueue(full_event).status(user)

        assert status.on_waitlist is True
        assert status.offer_active is False
