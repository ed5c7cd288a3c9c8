"""Admission, waitlist, promotion and confirmation for capacity-limited events.

Every mutating step locks the event row first, so all writers for one event are
serialised while writers for different events proceed independently.
"""

from .confirmation import ConfirmationTransaction
from .controller import AdmissionController
from .enums import NextStep, Reasons, RejectionCategory, RejectionCode
from .promotion import PromotionEngine
from .types import (
    AdmissionIntegrityError,
    AdmissionOutcome,
    AdmissionRejectedError,
    CapacityError,
    CapacityRaceError,
    OfferStateError,
    PhaseConflictError,
    PreconditionViolationError,
    WaitlistStatus,
)
from .waitlist import WaitlistQueue

__all__ = [
    "AdmissionController",
    "AdmissionIntegrityError",
    "AdmissionOutcome",
    "AdmissionRejectedError",
    "CapacityError",
    "CapacityRaceError",
    "ConfirmationTransaction",
    "NextStep",
    "OfferStateError",
    "PhaseConflictError",
    "PreconditionViolationError",
    "PromotionEngine",
    "Reasons",
    "RejectionCategory",
    "RejectionCode",
    "WaitlistQueue",
    "WaitlistStatus",
]
