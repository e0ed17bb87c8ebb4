"""
Per-field picker session.

A PickerState is an immutable snapshot; every event handler takes the current
state and returns the next one. The hosting UI renders from the returned
state and never writes the text buffer back on its own.

There are two values for one field: `committed_date`, which the owning form
treats as authoritative, and `text_buffer`, which is what the user sees and
edits. They are reconciled on blur and whenever a commit happens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, Optional

from linguatime.config import Config
from linguatime.formatting import formatter_for, is_valid_date_format
from linguatime.suggestions import Suggestion, resolve, suggestion_from_text
from linguatime.timeparse import reference_instant

logger = logging.getLogger(__name__)

CommitCallback = Callable[[Optional[datetime]], None]


class Phase(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    # exit animation only; never consulted for correctness
    CLOSING = "closing"


class Key(str, Enum):
    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    ENTER = "Enter"
    ESCAPE = "Escape"
    TAB = "Tab"


@dataclass(frozen=True)
class PickerState:
    committed_date: datetime | None = None
    text_buffer: str = ""
    live_suggestion: Suggestion | None = None
    phase: Phase = Phase.IDLE
    highlighted_index: int = 0
    show_time: bool = True
    phrases: tuple[str, ...] = Config.DEFAULT_SUGGESTIONS
    tz: str | None = None
    close_generation: int = 0
    closing_deadline: datetime | None = None
    # set by commits; the buffer is re-rendered from committed_date on refresh()
    needs_resync: bool = False

    @property
    def dropdown_open(self) -> bool:
        return self.phase == Phase.EDITING

    @property
    def dropdown_visible(self) -> bool:
        return self.phase != Phase.IDLE

    def format(self, d: datetime) -> str:
        return formatter_for(self.show_time)(d)


def initialize(
    initial_date: datetime | None = None,
    show_time: bool = True,
    phrases: Iterable[str] | None = None,
    tz: str | None = None,
) -> PickerState:
    fmt = formatter_for(show_time)
    if initial_date is not None:
        initial_date = reference_instant(tz, initial_date)
    return PickerState(
        committed_date=initial_date,
        text_buffer=fmt(initial_date) if initial_date else "",
        show_time=show_time,
        phrases=tuple(phrases) if phrases is not None else Config.DEFAULT_SUGGESTIONS,
        tz=tz,
    )


def _with_buffer(state: PickerState, text: str) -> PickerState:
    # a cached parse for a different buffer is stale
    live = state.live_suggestion
    if live is not None and live.input_string != text:
        live = None
    return replace(state, text_buffer=text, live_suggestion=live, highlighted_index=0)


def _reparse(state: PickerState, now: datetime | None) -> PickerState:
    live = state.live_suggestion
    if live is not None and live.input_string == state.text_buffer:
        return state
    return replace(state, live_suggestion=suggestion_from_text(state.text_buffer, tz=state.tz, now=now))


def _open(state: PickerState) -> PickerState:
    if state.phase == Phase.CLOSING:
        # supersede the pending close
        return replace(state, phase=Phase.EDITING, close_generation=state.close_generation + 1, closing_deadline=None)
    return replace(state, phase=Phase.EDITING)


def _commit(state: PickerState, date: datetime | None, on_commit: CommitCallback | None) -> PickerState:
    logger.debug("commit %s", date.isoformat() if date else None)
    state = replace(state, committed_date=date, needs_resync=date is not None)
    if on_commit is not None:
        on_commit(date)
    return state


def current_suggestions(
    state: PickerState,
    candidate_phrases: Iterable[str] | None = None,
    now: datetime | None = None,
) -> list[Suggestion]:
    phrases = state.phrases if candidate_phrases is None else candidate_phrases
    return resolve(state.text_buffer, state.live_suggestion, phrases, tz=state.tz, now=now)


def visible_suggestions(state: PickerState, now: datetime | None = None) -> list[Suggestion]:
    """What the dropdown shows: nothing while it is hidden."""
    if not state.dropdown_visible:
        return []
    return current_suggestions(state, now=now)


def on_focus(state: PickerState, now: datetime | None = None) -> PickerState:
    # the cached suggestion is cleared in many cases (including first load)
    if state.live_suggestion is None:
        state = _reparse(state, now)
    return _open(state)


on_click = on_focus


def on_text_changed(state: PickerState, new_text: str, now: datetime | None = None) -> PickerState:
    state = _with_buffer(state, new_text)
    state = _open(state)
    return _reparse(state, now)


def on_highlight(state: PickerState, index: int, now: datetime | None = None) -> PickerState:
    count = len(current_suggestions(state, now=now))
    return replace(state, highlighted_index=max(0, min(index, count - 1)))


def close_dropdown(state: PickerState, now: datetime | None = None) -> PickerState:
    """
    Start the exit transition. The host calls finish_closing() with the
    returned close_generation once the animation delay has elapsed.
    """
    if state.phase == Phase.IDLE:
        return replace(state, highlighted_index=0)
    now = reference_instant(state.tz, now)
    return replace(
        state,
        phase=Phase.CLOSING,
        highlighted_index=0,
        close_generation=state.close_generation + 1,
        closing_deadline=now + timedelta(milliseconds=Config.CLOSE_DELAY_MS),
    )


def finish_closing(state: PickerState, generation: int) -> PickerState:
    if state.phase != Phase.CLOSING or generation != state.close_generation:
        logger.debug("stale close timer %s (current %s)", generation, state.close_generation)
        return state
    return replace(state, phase=Phase.IDLE, live_suggestion=None, closing_deadline=None)


def expire_closing(state: PickerState, now: datetime | None = None) -> PickerState:
    if state.phase != Phase.CLOSING or state.closing_deadline is None:
        return state
    if reference_instant(state.tz, now) < state.closing_deadline:
        return state
    return finish_closing(state, state.close_generation)


on_click_outside = close_dropdown


def on_suggestion_chosen(
    state: PickerState,
    suggestion: Suggestion,
    on_commit: CommitCallback | None = None,
    now: datetime | None = None,
) -> PickerState:
    """
    The only selection path for the dropdown. The text buffer is left alone
    here; refresh() re-renders it from the committed date.
    """
    state = _commit(state, suggestion.date, on_commit)
    return close_dropdown(state, now)


def on_key(
    state: PickerState,
    key: Key | str,
    on_commit: CommitCallback | None = None,
    now: datetime | None = None,
) -> PickerState:
    try:
        key = Key(key)
    except ValueError:
        return state

    if key in (Key.ESCAPE, Key.TAB):
        return close_dropdown(state, now)

    suggestions = current_suggestions(state, now=now)
    if key == Key.ARROW_DOWN:
        return replace(state, highlighted_index=min(state.highlighted_index + 1, max(len(suggestions) - 1, 0)))
    if key == Key.ARROW_UP:
        return replace(state, highlighted_index=max(state.highlighted_index - 1, 0))

    if state.dropdown_open and suggestions:
        chosen = suggestions[min(state.highlighted_index, len(suggestions) - 1)]
        return on_suggestion_chosen(state, chosen, on_commit=on_commit, now=now)
    return state


def on_blur(
    state: PickerState,
    related_target_is_own_dropdown: bool = False,
    on_commit: CommitCallback | None = None,
) -> PickerState:
    """
    Sane defaults when focus leaves the field:

    - a suggestion click caused the blur: that click's own commit wins
    - committed date already shown in the buffer: nothing to do
    - nothing committed but the buffer parsed: commit the parse
    - empty buffer: the user cleared the field on purpose
    - committed date but unparsed edits: show the committed date again
    - otherwise: blank everything so no dead text is left behind
    """
    if related_target_is_own_dropdown:
        return state

    committed = state.committed_date
    if committed is not None and state.text_buffer == state.format(committed):
        return state

    live = state.live_suggestion
    if committed is None and live is not None and live.input_string == state.text_buffer:
        return _commit(state, live.date, on_commit)

    if state.text_buffer.strip() == "":
        return _commit(state, None, on_commit)

    if committed is not None:
        return _with_buffer(state, state.format(committed))

    return _with_buffer(_commit(state, None, on_commit), "")


def set_external_date(state: PickerState, date: datetime | None) -> PickerState:
    """The owning form (or the calendar popover) set the value directly."""
    if date is not None:
        date = reference_instant(state.tz, date)
    state = replace(state, committed_date=date, needs_resync=False)
    if date is None:
        return state
    return _with_buffer(state, state.format(date))


def on_picker_opened(state: PickerState) -> PickerState:
    # don't offer typed suggestions while the calendar popover is in use
    return replace(state, live_suggestion=None)


def refresh(state: PickerState) -> PickerState:
    if not state.needs_resync:
        return state
    state = replace(state, needs_resync=False)
    if state.committed_date is None:
        return state
    return _with_buffer(state, state.format(state.committed_date))


def to_dict(state: PickerState, now: datetime | None = None) -> dict:
    return {
        "committed_date": state.committed_date.isoformat() if state.committed_date else None,
        "text_buffer": state.text_buffer,
        # buffer holds a rendered date rather than free text
        "formatted": is_valid_date_format(state.text_buffer),
        "live_suggestion": state.live_suggestion.to_dict(state.show_time) if state.live_suggestion else None,
        "phase": state.phase.value,
        "dropdown_open": state.dropdown_open,
        "highlighted_index": state.highlighted_index,
        "show_time": state.show_time,
        "close_generation": state.close_generation,
        "closing_deadline": state.closing_deadline.isoformat() if state.closing_deadline else None,
        "suggestions": [s.to_dict(state.show_time) for s in visible_suggestions(state, now=now)],
    }
