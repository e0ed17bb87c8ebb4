"""
Deterministic phrase rules.

These cover the casual expressions the picker offers as suggestions, and pin
down how ambiguous ones resolve instead of leaving it to library defaults:

  - "friday" / "this friday": nearest Friday on or after the reference date;
    if the resolved instant is earlier than the reference instant it moves
    one week forward.
  - "next friday": strictly after today (1-7 days ahead).
  - "last friday": strictly before today.
  - "3pm", "morning": today, or tomorrow once that moment has passed.
  - holidays: this year's date, or next year's once it has passed.
  - date-only phrases keep the reference time of day.

Anything not matched here falls through to dateparser (see timeparse.py).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta

WEEKDAYS = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tue": 1, "tues": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thu": 3, "thur": 3, "thurs": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

NUMBER_WORDS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10, "eleven": 11,
    "twelve": 12,
}

# hour, minute
PERIODS = {
    "morning": (6, 0),
    "noon": (12, 0),
    "midday": (12, 0),
    "afternoon": (15, 0),
    "evening": (20, 0),
    "night": (22, 0),
    "midnight": (0, 0),
}

# month, day
HOLIDAYS = {
    "christmas": (12, 25),
    "christmas day": (12, 25),
    "christmas eve": (12, 24),
    "new year's day": (1, 1),
    "new years day": (1, 1),
    "new year's eve": (12, 31),
    "new years eve": (12, 31),
}

_UNITS = {
    "minute": "minutes", "min": "minutes",
    "hour": "hours", "hr": "hours",
    "day": "days",
    "week": "weeks", "wk": "weeks",
    "fortnight": "fortnights",
    "month": "months",
    "quarter": "quarters",
    "year": "years", "yr": "years",
}

_CLOCK_RE = re.compile(r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>[ap]\.?m\.?)?$")
_WEEKDAY_RE = re.compile(r"^(?:(?P<mod>this|next|last|coming|this coming)\s+)?(?P<day>[a-z]+)$")
_IN_RE = re.compile(r"^in\s+(?P<n>\d{1,6}|[a-z]+)\s+(?P<unit>[a-z]+)$")
_FROM_NOW_RE = re.compile(r"^(?P<n>\d{1,6}|[a-z]+)\s+(?P<unit>[a-z]+)\s+(?P<dir>from now|later|hence|ago)$")
_RELATIVE_UNIT_RE = re.compile(r"^(?P<mod>this|next|last)\s+(?P<unit>week|month|quarter|year)$")
_END_OF_RE = re.compile(r"^(?:the\s+)?end\s+of\s+(?:(?P<mod>this|the|next)\s+)?(?P<unit>week|month|year)$")

_TIME_PREFIXES = ("at ", "in the ", "the ", "around ", "by ")
_DAY_PREFIXES = ("on ",)


@dataclass
class _Day:
    when: datetime
    # shift applied when the finished instant lands before the reference
    rollover: timedelta | None = None
    # the phrase already fixed a time of day ("now", "in 2 hours")
    has_clock: bool = False
    implied: tuple[int, int] | None = None


def _elapsed(base: datetime, delta: relativedelta) -> datetime:
    # hours and minutes are real elapsed time, not wall-clock steps
    return (base.astimezone(timezone.utc) + delta).astimezone(base.tzinfo)


def normalize(text: str) -> str:
    phrase = (text or "").lower().replace("’", "'")
    phrase = re.sub(r"\s+", " ", phrase).strip()
    return phrase.rstrip("!?,;").strip()


def parse_clock(text: str) -> tuple[int, int] | None:
    """'3pm', '10:30 a.m.', '14:30', 'noon', 'morning' -> (hour, minute)."""
    if text in PERIODS:
        return PERIODS[text]

    m = _CLOCK_RE.match(text)
    if not m:
        return None
    hour = int(m.group("hour"))
    minute = int(m.group("minute") or 0)
    meridiem = m.group("meridiem")
    if minute > 59:
        return None
    if meridiem:
        if not 1 <= hour <= 12:
            return None
        return hour % 12 + (12 if meridiem.startswith("p") else 0), minute
    # bare "3" is too ambiguous; require "3:00" or a meridiem
    if m.group("minute") is None or hour > 23:
        return None
    return hour, minute


def _count(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


def _offset(n: int, unit: str) -> tuple[relativedelta, bool] | None:
    key = unit if unit in _UNITS else unit[:-1] if unit.endswith("s") else unit
    name = _UNITS.get(key)
    if name is None:
        return None
    if name == "fortnights":
        return relativedelta(weeks=2 * n), False
    if name == "quarters":
        return relativedelta(months=3 * n), False
    return relativedelta(**{name: n}), name in {"minutes", "hours"}


def _weekday(phrase: str, base: datetime) -> _Day | None:
    m = _WEEKDAY_RE.match(phrase)
    if not m or m.group("day") not in WEEKDAYS:
        return None
    target = WEEKDAYS[m.group("day")]
    mod = m.group("mod")

    if mod == "next":
        delta = (target - base.weekday()) % 7 or 7
        return _Day(base + timedelta(days=delta))
    if mod == "last":
        delta = (base.weekday() - target) % 7 or 7
        return _Day(base - timedelta(days=delta))

    delta = (target - base.weekday()) % 7
    return _Day(base + timedelta(days=delta), rollover=timedelta(days=7))


def _end_of(mod: str | None, unit: str, base: datetime) -> datetime:
    step = 1 if mod == "next" else 0
    if unit == "week":
        return base + timedelta(days=6 - base.weekday() + 7 * step)
    if unit == "month":
        return base + relativedelta(months=step, day=31)
    return base + relativedelta(years=step, month=12, day=31)


def resolve_day(phrase: str, base: datetime) -> _Day | None:
    if phrase == "today":
        return _Day(base)
    if phrase in {"now", "right now"}:
        return _Day(base, has_clock=True)
    if phrase == "tonight":
        return _Day(base, implied=PERIODS["night"])
    if phrase in {"tomorrow", "tmrw", "tmr"}:
        return _Day(base + timedelta(days=1))
    if phrase == "yesterday":
        return _Day(base - timedelta(days=1))
    if phrase in {"day after tomorrow", "the day after tomorrow"}:
        return _Day(base + timedelta(days=2))
    if phrase in {"day before yesterday", "the day before yesterday"}:
        return _Day(base - timedelta(days=2))

    if phrase in HOLIDAYS:
        month, day = HOLIDAYS[phrase]
        when = base.replace(month=month, day=day)
        if when.date() < base.date():
            when = when.replace(year=base.year + 1)
        return _Day(when)

    day = _weekday(phrase, base)
    if day is not None:
        return day

    m = _IN_RE.match(phrase) or _FROM_NOW_RE.match(phrase)
    if m:
        n = _count(m.group("n"))
        off = _offset(n, m.group("unit")) if n is not None else None
        if off is None:
            return None
        delta, has_clock = off
        if m.groupdict().get("dir") == "ago":
            delta = -delta
        if has_clock:
            return _Day(_elapsed(base, delta), has_clock=True)
        return _Day(base + delta)

    m = _RELATIVE_UNIT_RE.match(phrase)
    if m:
        step = {"this": 0, "next": 1, "last": -1}[m.group("mod")]
        delta, _ = _offset(step, m.group("unit"))
        return _Day(base + delta)

    m = _END_OF_RE.match(phrase)
    if m:
        return _Day(_end_of(m.group("mod"), m.group("unit"), base))

    return None


def _strip_prefix(text: str, prefixes: tuple[str, ...]) -> str:
    for prefix in prefixes:
        if text.startswith(prefix):
            return text[len(prefix):]
    return text


def _splits(phrase: str):
    """Yield (day_text, time_text) pairs, day-first then time-first."""
    tokens = phrase.split(" ")
    for k in range(1, len(tokens)):
        head = " ".join(tokens[:k]).rstrip(",")
        tail = " ".join(tokens[k:])
        yield head, _strip_prefix(tail, _TIME_PREFIXES)
    for k in range(1, len(tokens)):
        head = " ".join(tokens[:k]).rstrip(",")
        tail = " ".join(tokens[k:])
        yield _strip_prefix(tail, _DAY_PREFIXES), _strip_prefix(head, _TIME_PREFIXES)


def _finish(day: _Day, clock: tuple[int, int] | None, base: datetime) -> datetime:
    when = day.when
    clock = clock or day.implied
    if clock is not None:
        when = when.replace(hour=clock[0], minute=clock[1], second=0, microsecond=0)
    if day.rollover is not None and when < base:
        when = when + day.rollover
    # a wall time skipped by a DST jump becomes the instant it maps to
    return when.astimezone(timezone.utc).astimezone(base.tzinfo)


def match_phrase(text: str, base: datetime) -> datetime | None:
    """
    Resolve `text` against the phrase rules relative to `base`.
    Returns None when no rule covers the whole phrase.
    """
    phrase = normalize(text)
    if not phrase:
        return None

    clock = parse_clock(_strip_prefix(phrase, _TIME_PREFIXES))
    if clock is not None:
        return _finish(_Day(base, rollover=timedelta(days=1)), clock, base)

    day = resolve_day(phrase, base)
    if day is not None:
        return _finish(day, None, base)

    for day_text, time_text in _splits(phrase):
        clock = parse_clock(time_text)
        if clock is None:
            continue
        if day_text == "this":
            day = _Day(base)
        else:
            day = resolve_day(day_text, base)
        if day is None or day.has_clock:
            continue
        return _finish(day, clock, base)

    return None
