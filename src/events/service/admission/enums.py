"""Enums for the admission and waitlist system."""

from enum import StrEnum

from django.utils.translation import gettext_noop


class NextStep(StrEnum):
    """What the requester can do after a rejection."""

    RSVP = "rsvp"
    JOIN_WAITLIST = "join_waitlist"
    WAIT_FOR_OFFER = "wait_for_offer"
    CONFIRM_OFFER = "confirm_offer"
    WAIT_FOR_EVENT_TO_OPEN = "wait_for_event_to_open"


class RejectionCategory(StrEnum):
    """Families of recoverable rejections."""

    PHASE_CONFLICT = "phase_conflict"
    PRECONDITION = "precondition_violation"
    CAPACITY = "capacity"
    CAPACITY_RACE = "capacity_race"
    OFFER_STATE = "offer_state"


class RejectionCode(StrEnum):
    """Machine-readable rejection codes, one per concrete violation."""

    # Phase conflicts
    EVENT_NOT_PUBLISHED = "EVENT_NOT_PUBLISHED"
    EVENT_CANCELLED = "EVENT_CANCELLED"
    RSVP_DEADLINE_PASSED = "RSVP_DEADLINE_PASSED"
    EVENT_ONGOING = "EVENT_ONGOING"
    EVENT_COMPLETED = "EVENT_COMPLETED"

    # Capacity
    EVENT_AT_CAPACITY_WAITLIST_AVAILABLE = "EVENT_AT_CAPACITY_WAITLIST_AVAILABLE"
    EVENT_AT_CAPACITY = "EVENT_AT_CAPACITY"
    EVENT_NOT_AT_CAPACITY = "EVENT_NOT_AT_CAPACITY"

    # Preconditions
    WAITLIST_NOT_ENABLED = "WAITLIST_NOT_ENABLED"
    NO_CAPACITY_LIMIT = "NO_CAPACITY_LIMIT"
    ALREADY_RSVPD = "ALREADY_RSVPD"
    ALREADY_ON_WAITLIST = "ALREADY_ON_WAITLIST"
    NOT_ON_WAITLIST = "NOT_ON_WAITLIST"

    # Offer state
    NOT_NOTIFIED = "NOT_NOTIFIED"
    CONFIRMATION_EXPIRED = "CONFIRMATION_EXPIRED"

    # Capacity race
    SPOT_FILLED = "SPOT_FILLED"


class Reasons(StrEnum):
    """Human-readable rejection reasons.

    Note: Strings are marked with gettext_noop() for translation extraction.
    The actual translation happens when the rejection is raised.
    """

    EVENT_NOT_PUBLISHED = gettext_noop("Cannot RSVP to a draft event.")
    EVENT_CANCELLED = gettext_noop("Cannot RSVP to a cancelled event.")
    RSVP_DEADLINE_PASSED = gettext_noop(
        "RSVP deadline has passed. Please contact the organizer if you need to change your RSVP."
    )
    EVENT_ONGOING = gettext_noop("Cannot RSVP to an event that has already started.")
    EVENT_COMPLETED = gettext_noop("Cannot RSVP to a completed event.")
    EVENT_AT_CAPACITY_WAITLIST_AVAILABLE = gettext_noop("Event is at capacity. You can join the waitlist instead.")
    EVENT_AT_CAPACITY = gettext_noop("Event is at capacity.")
    EVENT_NOT_AT_CAPACITY = gettext_noop("Event is not at capacity. You can RSVP directly.")
    WAITLIST_NOT_ENABLED = gettext_noop("Waitlist is not enabled for this event.")
    NO_CAPACITY_LIMIT = gettext_noop("Event does not have a capacity limit.")
    ALREADY_RSVPD = gettext_noop("You are already confirmed for this event.")
    ALREADY_ON_WAITLIST = gettext_noop("You are already on the waitlist.")
    NOT_ON_WAITLIST = gettext_noop("You are not on the waitlist.")
    NOT_NOTIFIED = gettext_noop("You have not been notified of an available spot yet.")
    CONFIRMATION_EXPIRED = gettext_noop(
        "Your spot confirmation has expired. You have been removed from the waitlist and can join it again."
    )
    SPOT_FILLED = gettext_noop("Sorry, the spot has already been filled.")
