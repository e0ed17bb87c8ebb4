"""
Summary:
Interactive picker session in the terminal. Plain lines are typed into the
field; lines starting with ':' are events (:down, :up, :enter, :esc, :tab,
:focus, :blur, :outside, :pick N, :set <phrase>, :clear).
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional, Tuple

from linguatime import session as picker
from linguatime.timeparse import parse_date

KEYS = {
    ":down": picker.Key.ARROW_DOWN,
    ":up": picker.Key.ARROW_UP,
    ":enter": picker.Key.ENTER,
    ":esc": picker.Key.ESCAPE,
    ":tab": picker.Key.TAB,
}


def apply_command(
    state: picker.PickerState, line: str, now: Optional[datetime] = None
) -> Tuple[picker.PickerState, str]:
    """
    Summary:
    Applies one REPL line and returns (next_state, message). The close
    animation is treated as instantaneous, and commits are re-rendered into
    the buffer straight away.
    """
    commits = []
    cmd, _, arg = line.partition(" ")

    if not line.startswith(":"):
        state = picker.on_text_changed(state, line, now=now)
    elif cmd in KEYS:
        state = picker.on_key(state, KEYS[cmd], on_commit=commits.append, now=now)
    elif cmd == ":focus":
        state = picker.on_focus(state, now=now)
    elif cmd == ":blur":
        state = picker.on_blur(state, on_commit=commits.append)
    elif cmd == ":outside":
        state = picker.on_click_outside(state, now=now)
    elif cmd == ":pick":
        suggestions = picker.current_suggestions(state, now=now)
        if not arg.isdigit() or int(arg) >= len(suggestions):
            return state, f"No suggestion #{arg}"
        state = picker.on_suggestion_chosen(state, suggestions[int(arg)], on_commit=commits.append, now=now)
    elif cmd == ":set":
        state = picker.set_external_date(state, parse_date(arg, tz=state.tz, base=now))
    elif cmd == ":clear":
        state = picker.set_external_date(state, None)
    else:
        return state, f"Unknown command {cmd}"

    if state.phase == picker.Phase.CLOSING:
        state = picker.finish_closing(state, state.close_generation)
    state = picker.refresh(state)

    if commits:
        value = commits[-1]
        return state, f"Committed: {state.format(value)}" if value else "Cleared"
    return state, ""


def render(state: picker.PickerState, now: Optional[datetime] = None) -> str:
    lines = [f"[{state.text_buffer}]  committed={state.format(state.committed_date) if state.committed_date else '-'}"]
    for i, sugg in enumerate(picker.visible_suggestions(state, now=now)):
        marker = ">" if i == state.highlighted_index else " "
        lines.append(f" {marker} {i}. {sugg.input_string:<24} {state.format(sugg.date)}")
    return "\n".join(lines)


def run_repl(state: picker.PickerState, as_json: bool = False) -> None:
    print("linguatime picker. Type a date, or :help. Type 'quit' to exit.\n")

    while True:
        line = input("date> ").strip()
        if line.lower() in {"quit", "exit"}:
            break
        if line == ":help":
            print(__doc__)
            continue

        state, message = apply_command(state, line)
        if message:
            print(message)
        if as_json:
            print(json.dumps(picker.to_dict(state), ensure_ascii=False, indent=2))
        else:
            print(render(state))
        print()
