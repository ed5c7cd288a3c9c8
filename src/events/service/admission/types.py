"""Types and exceptions for the admission system."""

import datetime
import typing as t
import uuid

from pydantic import BaseModel

from .enums import NextStep, RejectionCategory, RejectionCode


class AdmissionOutcome(BaseModel):
    """Result of an admission, waitlist or confirmation decision."""

    allowed: bool
    event_id: uuid.UUID
    code: RejectionCode | None = None
    category: RejectionCategory | None = None
    reason: str | None = None  # we don't use the enum here because we want translation
    next_step: NextStep | None = None
    effective_phase: str | None = None


class WaitlistStatus(BaseModel):
    """A person's standing in an event's waitlist."""

    event_id: uuid.UUID
    on_waitlist: bool
    waitlist_open: bool
    max_attendees: int | None = None
    position: int | None = None
    total_waitlist: int | None = None
    created_at: datetime.datetime | None = None
    offered_at: datetime.datetime | None = None
    offer_expires_at: datetime.datetime | None = None
    offer_active: bool = False


class AdmissionRejectedError(Exception):
    """A recoverable rejection; ``outcome`` tells the caller what to do next."""

    category: t.ClassVar[RejectionCategory]

    def __init__(self, message: str, outcome: AdmissionOutcome) -> None:
        """Initialize the exception with the rejection outcome."""
        super().__init__(message)
        self.outcome = outcome

    @property
    def code(self) -> RejectionCode | None:
        """Shortcut to the outcome's rejection code."""
        return self.outcome.code


class PhaseConflictError(AdmissionRejectedError):
    """The event is not in the phase the operation requires."""

    category = RejectionCategory.PHASE_CONFLICT


class PreconditionViolationError(AdmissionRejectedError):
    """The person or event does not satisfy the operation's preconditions."""

    category = RejectionCategory.PRECONDITION


class CapacityError(AdmissionRejectedError):
    """Capacity does not allow the requested path (full, or not full yet)."""

    category = RejectionCategory.CAPACITY


class CapacityRaceError(AdmissionRejectedError):
    """Capacity was consumed between the decision and the commit."""

    category = RejectionCategory.CAPACITY_RACE


class OfferStateError(AdmissionRejectedError):
    """The waitlist offer is missing or has lapsed."""

    category = RejectionCategory.OFFER_STATE


class AdmissionIntegrityError(RuntimeError):
    """The atomic confirm step was observed partially applied.

    This indicates a store-level integrity fault and is never a caller-recoverable rejection.
    """
