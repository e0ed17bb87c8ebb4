"""
Canonical text forms for committed dates.

Both forms are locale-stable (fixed English month abbreviations) and are read
back by the phrase parser, so a buffer that shows a formatted date always
re-parses to the same minute.
"""

from __future__ import annotations

import re
from datetime import datetime, tzinfo
from typing import Callable

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_CANONICAL_RE = re.compile(
    r"^(?P<month>" + "|".join(MONTHS) + r") (?P<day>\d{1,2}), (?P<year>\d{4})"
    r"(?: (?P<hour>\d{1,2}):(?P<minute>\d{2}) (?P<meridiem>AM|PM))?$"
)


def format_date_only(d: datetime) -> str:
    return f"{MONTHS[d.month - 1]} {d.day}, {d.year}"


def format_date_time(d: datetime) -> str:
    hour = d.hour % 12 or 12
    meridiem = "AM" if d.hour < 12 else "PM"
    return f"{format_date_only(d)} {hour}:{d.minute:02d} {meridiem}"


def formatter_for(show_time: bool) -> Callable[[datetime], str]:
    return format_date_time if show_time else format_date_only


def parse_canonical(text: str, zone: tzinfo | None = None) -> datetime | None:
    """
    Read back a string produced by format_date_only / format_date_time.
    Date-only strings resolve to midnight. Returns None for anything else,
    including well-shaped strings naming an impossible date ("Feb 30, 2024").
    """
    m = _CANONICAL_RE.match((text or "").strip())
    if not m:
        return None

    hour = minute = 0
    if m.group("hour") is not None:
        h12 = int(m.group("hour"))
        minute = int(m.group("minute"))
        if not 1 <= h12 <= 12:
            return None
        hour = h12 % 12 + (12 if m.group("meridiem") == "PM" else 0)

    try:
        return datetime(
            int(m.group("year")),
            MONTHS.index(m.group("month")) + 1,
            int(m.group("day")),
            hour,
            minute,
            tzinfo=zone,
        )
    except ValueError:
        return None


def is_valid_date_format(text: str) -> bool:
    """True when `text` is exactly one of the formatter's own output shapes."""
    return parse_canonical(text) is not None
