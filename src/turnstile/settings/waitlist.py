"""Admission and waitlist tuning."""

from decouple import config

# How long a promoted waitlist entry has to confirm its spot.
WAITLIST_OFFER_WINDOW_HOURS = config("WAITLIST_OFFER_WINDOW_HOURS", default=24, cast=int)

# Used as the event's end when no explicit end is stored.
DEFAULT_EVENT_DURATION_HOURS = config("DEFAULT_EVENT_DURATION_HOURS", default=3, cast=int)

# Bounded retries for the conditional offer update in the promotion engine.
WAITLIST_PROMOTION_MAX_ATTEMPTS = config("WAITLIST_PROMOTION_MAX_ATTEMPTS", default=3, cast=int)
