"""
Shared fixtures: every test resolves phrases against a fixed Friday afternoon.
"""
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

TZ = "UTC"
# Friday
REF = datetime(2024, 3, 15, 14, 30, tzinfo=ZoneInfo(TZ))

DEFAULT_PHRASES = ["Tomorrow", "Tomorrow morning", "Tomorrow night", "Next Monday", "Next Sunday"]


def at(*args) -> datetime:
    return datetime(*args, tzinfo=ZoneInfo(TZ))


@pytest.fixture
def tz():
    return TZ


@pytest.fixture
def now():
    return REF
