"""
This conftest.py provides fixtures shared by all app tests.
"""

import secrets
import string
import typing as t
from datetime import datetime, time, timedelta

import faker
import pytest
from django.utils import timezone

from accounts.models import TurnstileUser
from turnstile.celery import app as celery_app


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True
    # The Celery app caches its configuration once read.
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True


class TurnstileUserFactory:
    """Factory for creating TurnstileUser instances for testing."""

    fake = faker.Faker()

    def create_user(self, **kwargs: t.Any) -> TurnstileUser:
        username = kwargs.pop(
            "username", "".join(secrets.choice(string.ascii_lowercase) for _ in range(8)) + "@user.test"
        )
        email = kwargs.pop("email", username + ("@test.com" if "@" not in username else ""))
        password = kwargs.pop("password", "password")
        first_name = kwargs.pop("first_name", self.fake.first_name())
        last_name = kwargs.pop("last_name", self.fake.last_name())
        preferred_name = kwargs.pop("preferred_name", f"{first_name} {last_name}")
        return TurnstileUser.objects.create_user(
            username=username,
            email=email,
            password=password,
            preferred_name=preferred_name,
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

    def __call__(self, **kwargs: t.Any) -> TurnstileUser:
        return self.create_user(**kwargs)


@pytest.fixture
def user_factory() -> TurnstileUserFactory:
    return TurnstileUserFactory()


@pytest.fixture
def user(user_factory: TurnstileUserFactory) -> TurnstileUser:
    """A regular user."""
    return user_factory(username="attendee@user.test")


@pytest.fixture
def next_week() -> datetime:
    today = timezone.now()
    same_time_next_week = today + timedelta(days=7)
    noon = time(hour=12, minute=0)
    return timezone.make_aware(
        datetime.combine(same_time_next_week.date(), noon),
        timezone.get_current_timezone(),
    )
