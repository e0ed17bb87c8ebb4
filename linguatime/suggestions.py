"""
Suggestion list for the picker dropdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from linguatime.formatting import formatter_for
from linguatime.timeparse import parse_date, reference_instant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Suggestion:
    date: datetime
    # unique key and display label
    input_string: str

    def to_dict(self, show_time: bool = True) -> dict:
        return {
            "input_string": self.input_string,
            "date": self.date.isoformat(),
            "label": formatter_for(show_time)(self.date),
        }


def suggestion_from_text(text: str, tz: str | None = None, now: datetime | None = None) -> Suggestion | None:
    dt = parse_date(text, tz=tz, base=now)
    if dt is None:
        return None
    return Suggestion(date=dt, input_string=text)


def _from_phrases(phrases: Iterable[str], tz: str | None, now: datetime) -> list[Suggestion]:
    out = []
    for phrase in phrases:
        sugg = suggestion_from_text(phrase, tz=tz, now=now)
        if sugg is None:
            logger.debug("candidate phrase %r does not parse; dropped", phrase)
            continue
        out.append(sugg)
    return out


def resolve(
    input_text: str,
    live_suggestion: Suggestion | None,
    candidate_phrases: Iterable[str],
    *,
    tz: str | None = None,
    now: datetime | None = None,
) -> list[Suggestion]:
    """
    Ordered suggestions for the current input:

      1. no input: every candidate phrase
      2. candidates containing the input (case-insensitive), in order
      3. otherwise the live parse of the input, if any
      4. otherwise nothing

    Canonical phrases win whenever they overlap the typed text, so a
    free-text parse never competes with a matching canned option.
    """
    phrases = list(candidate_phrases)
    # one reference instant for the whole list
    now = reference_instant(tz, now)

    if not input_text:
        return _from_phrases(phrases, tz, now)

    needle = input_text.lower()
    matching = [p for p in phrases if needle in p.lower()]
    if matching:
        return _from_phrases(matching, tz, now)

    if live_suggestion is not None and live_suggestion.input_string == input_text:
        return [live_suggestion]
    return []
