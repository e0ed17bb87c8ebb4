"""
Summary:
Example field presets and the small bits of form logic from the showcase
pages: appointment validation and the recent-commit history.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from threading import Lock
from typing import Any, Dict, List, Optional

from linguatime.config import Config
from linguatime.formatting import format_date_time

MAX_APPOINTMENT_DAYS = 365


@dataclass(frozen=True)
class FieldPreset:
    name: str
    label: str
    show_time: bool
    suggestions: tuple[str, ...]
    placeholder: str = ""
    # history entry recorded when the field commits
    history_label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "show_time": self.show_time,
            "suggestions": list(self.suggestions),
            "placeholder": self.placeholder,
            "history_label": self.history_label,
        }


PRESETS = (
    FieldPreset(
        name="basic",
        label="Select Date & Time",
        show_time=True,
        suggestions=Config.DEFAULT_SUGGESTIONS,
        placeholder="Enter date and time (e.g., 'tomorrow at 3pm')",
    ),
    FieldPreset(
        name="appointment",
        label="Appointment Date & Time",
        show_time=True,
        suggestions=("Tomorrow at 9am", "Next Monday at 2pm", "Next Friday at 10:30am", "In 3 days at 3pm"),
        placeholder="Enter appointment date (e.g., 'next Tuesday at 2pm')",
    ),
    FieldPreset(
        name="follow_up",
        label="Follow-up Date (Optional)",
        show_time=False,
        suggestions=("In 2 weeks", "In 1 month", "In 3 months", "Next quarter"),
        placeholder="Enter follow-up date (e.g., 'in 2 weeks')",
    ),
    FieldPreset(
        name="meeting",
        label="Schedule a meeting",
        show_time=True,
        suggestions=("Tomorrow at 10am", "Next Monday at 2pm", "Friday afternoon", "Next week at 9am"),
        placeholder="When should we meet? (e.g., 'next Tuesday at 2pm')",
        history_label="Meeting scheduled",
    ),
    FieldPreset(
        name="deadline",
        label="Set project deadline",
        show_time=False,
        suggestions=("End of this week", "End of the month", "In 2 weeks", "Next quarter"),
        placeholder="When is the deadline? (e.g., 'end of next week')",
        history_label="Deadline set",
    ),
    FieldPreset(
        name="event",
        label="Plan an event",
        show_time=True,
        suggestions=("Next Saturday at 7pm", "Christmas Eve", "New Year's Day", "Next week"),
        placeholder="When is the event? (e.g., 'next Saturday evening')",
        history_label="Event planned",
    ),
)


def get_preset(name: str) -> Optional[FieldPreset]:
    for preset in PRESETS:
        if preset.name == name:
            return preset
    return None


def validate_appointment(appointment: datetime, now: datetime) -> Dict[str, str]:
    """
    Summary:
    Returns field -> message for every problem; empty dict when valid.
    """
    errors: Dict[str, str] = {}
    if appointment < now:
        errors["appointment_date"] = "Appointment date cannot be in the past"
    elif appointment > now + timedelta(days=MAX_APPOINTMENT_DAYS):
        errors["appointment_date"] = "Appointment cannot be more than a year in the future"
    return errors


class ParseHistory:
    """Most recent commits, newest first."""

    def __init__(self, size: int = Config.HISTORY_SIZE):
        self._entries: deque = deque(maxlen=size)
        self._lock = Lock()

    def record(self, label: str, parsed: datetime, at: datetime) -> None:
        with self._lock:
            self._entries.appendleft({"input": label, "parsed": parsed, "timestamp": at})

    def entries(self) -> List[Dict[str, Any]]:
        with self._lock:
            items = list(self._entries)
        out = []
        for index, entry in enumerate(items):
            out.append({
                "input": entry["input"],
                "parsed": entry["parsed"].isoformat(),
                "parsed_label": format_date_time(entry["parsed"]),
                "timestamp": entry["timestamp"].isoformat(),
                "age": "Latest" if index == 0 else f"{index + 1} ago",
            })
        return out

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
