"""
Summary:
FastAPI JSON API hosting picker sessions for the showcase pages:
- POST /api/parse and /api/suggestions expose the engine directly
- /api/pickers/... keeps one PickerState per mounted field and applies events
- /api/appointments and /api/history back the example forms
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime
from threading import Lock
from typing import Dict, List, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from linguatime import session as picker
from linguatime.config import Config
from linguatime.examples import PRESETS, ParseHistory, get_preset, validate_appointment
from linguatime.formatting import format_date_only, format_date_time
from linguatime.suggestions import Suggestion, resolve, suggestion_from_text
from linguatime.timeparse import parse_natural_datetime, reference_instant

logger = logging.getLogger(__name__)

app = FastAPI(title="linguatime")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

history = ParseHistory()


class _Picker:
    def __init__(self, state: picker.PickerState, label: str = ""):
        self.state = state
        self.label = label
        # events for one field are applied one at a time
        self.lock = Lock()
        self.touched = time.monotonic()


_pickers: Dict[str, _Picker] = {}
_pickers_lock = Lock()


def _evict_pickers(clock: float) -> None:
    """Drop sessions whose page went away without unmounting. Caller holds _pickers_lock."""
    for picker_id, entry in list(_pickers.items()):
        if clock - entry.touched > Config.PICKER_IDLE_SECONDS:
            del _pickers[picker_id]
            logger.debug("picker %s evicted after %.0fs idle", picker_id, clock - entry.touched)

    overflow = len(_pickers) - Config.MAX_PICKERS
    if overflow > 0:
        oldest = sorted(_pickers, key=lambda pid: _pickers[pid].touched)[:overflow]
        for picker_id in oldest:
            del _pickers[picker_id]
            logger.debug("picker %s evicted, over the %d session cap", picker_id, Config.MAX_PICKERS)


class ParseRequest(BaseModel):
    text: str
    tz: Optional[str] = None
    now: Optional[datetime] = None


class SuggestionsRequest(BaseModel):
    text: str = ""
    phrases: Optional[List[str]] = None
    show_time: bool = True
    tz: Optional[str] = None
    now: Optional[datetime] = None


class CreatePickerRequest(BaseModel):
    initial_date: Optional[datetime] = None
    show_time: bool = True
    suggestions: Optional[List[str]] = None
    label: str = ""
    tz: Optional[str] = None
    # name from GET /api/examples; fills show_time, suggestions and label
    preset: Optional[str] = None


class PickerEvent(BaseModel):
    type: Literal[
        "text", "focus", "click", "key", "blur", "choose",
        "highlight", "outside", "picker_open", "external", "refresh",
    ]
    text: Optional[str] = None
    key: Optional[str] = None
    index: Optional[int] = None
    input_string: Optional[str] = None
    date: Optional[datetime] = None
    related_target_is_dropdown: bool = False
    now: Optional[datetime] = None


class AppointmentRequest(BaseModel):
    appointment_date: datetime
    follow_up_date: Optional[datetime] = None
    now: Optional[datetime] = None


def _check_tz(tz: Optional[str]) -> Optional[str]:
    if tz is None:
        return None
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {tz}")
    return tz


def _get_picker(picker_id: str) -> _Picker:
    with _pickers_lock:
        clock = time.monotonic()
        _evict_pickers(clock)
        entry = _pickers.get(picker_id)
        if entry is not None:
            entry.touched = clock
    if entry is None:
        raise HTTPException(status_code=404, detail="Picker not found")
    return entry


def _picker_payload(picker_id: str, entry: _Picker, now: Optional[datetime] = None) -> dict:
    return {"id": picker_id, "label": entry.label, "state": picker.to_dict(entry.state, now=now)}


@app.post("/api/parse")
def api_parse(req: ParseRequest) -> JSONResponse:
    tz = _check_tz(req.tz)
    parsed = parse_natural_datetime(req.text, tz=tz, base=req.now)
    if parsed is None:
        return JSONResponse({"text": req.text, "match": False})
    return JSONResponse({
        "text": req.text,
        "match": True,
        "date": parsed.dt.isoformat(),
        "tz": parsed.tz,
        "source": parsed.source,
        "date_only": format_date_only(parsed.dt),
        "date_time": format_date_time(parsed.dt),
    })


@app.post("/api/suggestions")
def api_suggestions(req: SuggestionsRequest) -> JSONResponse:
    tz = _check_tz(req.tz)
    phrases = req.phrases if req.phrases is not None else Config.DEFAULT_SUGGESTIONS
    live = suggestion_from_text(req.text, tz=tz, now=req.now) if req.text else None
    suggestions = resolve(req.text, live, phrases, tz=tz, now=req.now)
    return JSONResponse({"suggestions": [s.to_dict(req.show_time) for s in suggestions]})


@app.get("/api/examples")
def api_examples() -> JSONResponse:
    return JSONResponse({"examples": [p.to_dict() for p in PRESETS]})


@app.post("/api/pickers")
def api_create_picker(req: CreatePickerRequest) -> JSONResponse:
    tz = _check_tz(req.tz)
    show_time, phrases, label = req.show_time, req.suggestions, req.label
    if req.preset is not None:
        preset = get_preset(req.preset)
        if preset is None:
            raise HTTPException(status_code=400, detail=f"Unknown preset: {req.preset}")
        show_time = preset.show_time
        phrases = phrases if phrases is not None else preset.suggestions
        label = label or preset.history_label

    state = picker.initialize(req.initial_date, show_time=show_time, phrases=phrases, tz=tz)
    picker_id = uuid.uuid4().hex
    entry = _Picker(state, label=label)
    with _pickers_lock:
        _pickers[picker_id] = entry
        _evict_pickers(entry.touched)
    logger.debug("picker %s mounted", picker_id)
    return JSONResponse(_picker_payload(picker_id, entry))


@app.get("/api/pickers/{picker_id}")
def api_get_picker(picker_id: str) -> JSONResponse:
    entry = _get_picker(picker_id)
    with entry.lock:
        entry.state = picker.expire_closing(entry.state)
        return JSONResponse(_picker_payload(picker_id, entry))


@app.delete("/api/pickers/{picker_id}")
def api_delete_picker(picker_id: str) -> JSONResponse:
    with _pickers_lock:
        entry = _pickers.pop(picker_id, None)
    if entry is None:
        raise HTTPException(status_code=404, detail="Picker not found")
    return JSONResponse({"id": picker_id, "deleted": True})


def _apply(entry: _Picker, event: PickerEvent) -> picker.PickerState:
    state = picker.expire_closing(entry.state, now=event.now)
    now = event.now

    def on_commit(date: Optional[datetime]) -> None:
        if date is not None and entry.label:
            history.record(entry.label, date, reference_instant(state.tz, now))

    if event.type == "text":
        return picker.on_text_changed(state, event.text or "", now=now)
    if event.type in ("focus", "click"):
        return picker.on_focus(state, now=now)
    if event.type == "key":
        return picker.on_key(state, event.key or "", on_commit=on_commit, now=now)
    if event.type == "blur":
        return picker.on_blur(state, event.related_target_is_dropdown, on_commit=on_commit)
    if event.type == "choose":
        chosen: Optional[Suggestion] = None
        for sugg in picker.current_suggestions(state, now=now):
            if sugg.input_string == event.input_string:
                chosen = sugg
                break
        if chosen is None:
            raise HTTPException(status_code=400, detail="Suggestion not offered")
        return picker.on_suggestion_chosen(state, chosen, on_commit=on_commit, now=now)
    if event.type == "highlight":
        return picker.on_highlight(state, event.index or 0, now=now)
    if event.type == "outside":
        return picker.on_click_outside(state, now=now)
    if event.type == "picker_open":
        return picker.on_picker_opened(state)
    if event.type == "external":
        if event.date is not None:
            on_commit(event.date)
        return picker.set_external_date(state, event.date)
    return picker.refresh(state)


@app.post("/api/pickers/{picker_id}/events")
def api_picker_event(picker_id: str, event: PickerEvent) -> JSONResponse:
    entry = _get_picker(picker_id)
    with entry.lock:
        entry.state = _apply(entry, event)
        return JSONResponse(_picker_payload(picker_id, entry, now=event.now))


@app.post("/api/appointments")
def api_appointments(req: AppointmentRequest) -> JSONResponse:
    now = reference_instant(None, req.now)
    appointment = reference_instant(None, req.appointment_date)
    errors = validate_appointment(appointment, now)
    if errors:
        return JSONResponse({"errors": errors}, status_code=400)

    follow_up = req.follow_up_date
    return JSONResponse({
        "scheduled": True,
        "appointment_date": format_date_time(appointment),
        "follow_up_date": format_date_only(follow_up) if follow_up else None,
    })


@app.get("/api/history")
def api_history() -> JSONResponse:
    return JSONResponse({"history": history.entries()})
