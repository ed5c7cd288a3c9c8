from .event import Event
from .rsvp import EventRSVP
from .waitlist import EventWaitList

__all__ = [
    "Event",
    "EventRSVP",
    "EventWaitList",
]
