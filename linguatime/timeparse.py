# linguatime/timeparse.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

import dateparser

from linguatime.config import Config
from linguatime.formatting import parse_canonical
from linguatime.grammar import match_phrase

logger = logging.getLogger(__name__)


@dataclass
class ParsedWhen:
    dt: datetime
    tz: str
    text: str
    # "canonical", "grammar" or "dateparser"
    source: str


def reference_instant(tz: str | None = None, base: datetime | None = None) -> datetime:
    """`base` (or now) as an aware datetime in `tz`."""
    zone = ZoneInfo(tz or Config.TIMEZONE)
    if base is None:
        return datetime.now(tz=zone)
    if base.tzinfo is None:
        return base.replace(tzinfo=zone)
    return base.astimezone(zone)


def _dateparser_settings(tz: str, base: datetime) -> dict:
    return {
        "RETURN_AS_TIMEZONE_AWARE": True,
        "TIMEZONE": tz,
        "TO_TIMEZONE": tz,
        # dateparser wants a naive base expressed in TIMEZONE
        "RELATIVE_BASE": base.replace(tzinfo=None),
        # Prefer future dates when ambiguous: "Tuesday" => next Tuesday
        "PREFER_DATES_FROM": "future",
    }


def parse_natural_datetime(text: str, tz: str | None = None, base: datetime | None = None) -> ParsedWhen | None:
    """
    Parse user-friendly text like:
      - "next Tue at 5pm"
      - "tomorrow morning"
      - "in 2 hours"
      - "Mar 15, 2024 2:30 PM" (the formatter's own output)
    Returns timezone-aware datetime or None. Never raises for odd input.
    """
    if not text or not text.strip():
        return None

    tz = tz or Config.TIMEZONE
    zone = ZoneInfo(tz)
    base = reference_instant(tz, base)

    dt = parse_canonical(text, zone)
    if dt is not None:
        return ParsedWhen(dt=dt, tz=tz, text=text, source="canonical")

    try:
        dt = match_phrase(text, base)
    except (ValueError, OverflowError) as e:
        # "in 99999 years" and friends
        logger.debug("phrase %r out of range: %s", text, e)
        return None
    if dt is not None:
        return ParsedWhen(dt=dt, tz=tz, text=text, source="grammar")

    try:
        dt = dateparser.parse(text, settings=_dateparser_settings(tz, base), languages=["en"])
    except (ValueError, OverflowError) as e:
        logger.debug("dateparser rejected %r: %s", text, e)
        return None
    if dt is None:
        return None

    # Ensure tz-aware in our target tz
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone)
    else:
        dt = dt.astimezone(zone)

    logger.debug("dateparser resolved %r -> %s", text, dt.isoformat())
    return ParsedWhen(dt=dt, tz=tz, text=text, source="dateparser")


def parse_date(text: str, tz: str | None = None, base: datetime | None = None) -> datetime | None:
    parsed = parse_natural_datetime(text, tz=tz, base=base)
    return parsed.dt if parsed else None
