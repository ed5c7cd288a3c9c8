"""End-to-end flows through admission, waitlist, promotion and confirmation."""

import typing as t
from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from accounts.models import TurnstileUser
from events.models import Event, EventRSVP, EventWaitList
from events.service import rsvp_service
from events.service.admission import (
    AdmissionController,
    CapacityError,
    ConfirmationTransaction,
    OfferStateError,
    PhaseConflictError,
    RejectionCode,
    WaitlistQueue,
)
from events.service.event_phase import effective_phase

pytestmark = pytest.mark.django_db


@pytest.fixture
def single_spot_event(next_week: t.Any) -> Event:
    return Event.objects.create(
        name="Single Spot",
        status=Event.EventStatus.PUBLISHED,
        start=next_week,
        max_attendees=1,
        waitlist_open=True,
    )


@pytest.fixture
def people(user_factory: t.Callable[..., TurnstileUser]) -> tuple[TurnstileUser, TurnstileUser]:
    return user_factory(), user_factory()


def _assert_invariants(event: Event) -> None:
    confirmed = set(EventRSVP.objects.confirmed().filter(event=event).values_list("user_id", flat=True))
    queued = set(EventWaitList.objects.filter(event=event).values_list("user_id", flat=True))
    if event.max_attendees is not None:
        assert len(confirmed) <= event.max_attendees
    assert not confirmed & queued


def test_vacated_spot_is_offered_and_confirmed(
    single_spot_event: Event,
    people: tuple[TurnstileUser, TurnstileUser],
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    a, b = people

    AdmissionController(a, single_spot_event).request_admission()
    _assert_invariants(single_spot_event)

    with pytest.raises(CapacityError) as exc_info:
        AdmissionController(b, single_spot_event).request_admission()
    assert exc_info.value.code == RejectionCode.EVENT_AT_CAPACITY_WAITLIST_AVAILABLE

    WaitlistQueue(single_spot_event).join(b)
    assert WaitlistQueue(single_spot_event).position(b) == 1
    _assert_invariants(single_spot_event)

    with django_capture_on_commit_callbacks(execute=True):
        rsvp_service.remove_rsvp(single_spot_event, a)

    entry = EventWaitList.objects.get(event=single_spot_event, user=b)
    assert entry.offered_at is not None

    ConfirmationTransaction(b, single_spot_event).confirm()

    assert EventRSVP.objects.get(event=single_spot_event, user=b).status == EventRSVP.RsvpStatus.YES
    assert not EventWaitList.objects.filter(event=single_spot_event).exists()
    _assert_invariants(single_spot_event)


def test_unconfirmed_offer_lapses_after_a_day(
    single_spot_event: Event,
    people: tuple[TurnstileUser, TurnstileUser],
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    a, b = people
    AdmissionController(a, single_spot_event).request_admission()
    WaitlistQueue(single_spot_event).join(b)

    with django_capture_on_commit_callbacks(execute=True):
        rsvp_service.remove_rsvp(single_spot_event, a)

    with freeze_time(timezone.now() + timedelta(hours=24, seconds=1)):
        with pytest.raises(OfferStateError) as exc_info:
            ConfirmationTransaction(b, single_spot_event).confirm()

    assert exc_info.value.code == RejectionCode.CONFIRMATION_EXPIRED
    assert not EventWaitList.objects.filter(event=single_spot_event).exists()
    assert not EventRSVP.objects.confirmed().filter(event=single_spot_event).exists()


def test_join_requires_event_to_be_full(
    user_factory: t.Callable[..., TurnstileUser], event: Event, attendees: list[TurnstileUser]
) -> None:
    third = user_factory()
    AdmissionController(attendees[0], event).request_admission()

    with pytest.raises(CapacityError) as exc_info:
        WaitlistQueue(event).join(third)
    assert exc_info.value.code == RejectionCode.EVENT_NOT_AT_CAPACITY

    AdmissionController(attendees[1], event).request_admission()

    WaitlistQueue(event).join(third)
    assert WaitlistQueue(event).position(third) == 1
    _assert_invariants(event)


def test_cancelled_event_rejects_admission_and_join(user: TurnstileUser, event: Event) -> None:
    event.status = Event.EventStatus.CANCELLED
    event.save()

    assert effective_phase(event) == Event.EventStatus.CANCELLED

    with pytest.raises(PhaseConflictError) as admission_error:
        AdmissionController(user, event).request_admission()
    with pytest.raises(PhaseConflictError) as join_error:
        WaitlistQueue(event).join(user)

    assert admission_error.value.code == RejectionCode.EVENT_CANCELLED
    assert join_error.value.code == RejectionCode.EVENT_CANCELLED
    assert admission_error.value.outcome.effective_phase == Event.EventStatus.CANCELLED


def test_downgrade_then_rejoin_cycle_keeps_invariants(
    user_factory: t.Callable[..., TurnstileUser],
    full_event: Event,
    attendees: list[TurnstileUser],
    django_capture_on_commit_callbacks: t.Any,
) -> None:
    waiting = [user_factory() for _ in range(3)]
    for person in waiting:
        WaitlistQueue(full_event).join(person)

    with django_capture_on_commit_callbacks(execute=True):
        rsvp_service.update_rsvp(full_event, attendees[0], EventRSVP.RsvpStatus.NO)
        rsvp_service.update_rsvp(full_event, attendees[1], EventRSVP.RsvpStatus.MAYBE)

    offered = list(EventWaitList.objects.filter(event=full_event, offered_at__isnull=False).fifo())
    assert [entry.user_id for entry in offered] == [waiting[0].id, waiting[1].id]

    for person in waiting[:2]:
        ConfirmationTransaction(person, full_event).confirm()
        _assert_invariants(full_event)

    assert WaitlistQueue(full_event).position(waiting[2]) == 1
    with pytest.raises(CapacityError):
        AdmissionController(attendees[0], full_event).request_admission()
    _assert_invariants(full_event)
