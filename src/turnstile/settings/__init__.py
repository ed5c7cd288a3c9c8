# ruff: noqa: F403
from .base import *
from .celery import *
from .observability import *
from .waitlist import *
