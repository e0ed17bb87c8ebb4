"""
Tests for the terminal session driver and CLI entrypoint
"""
import json

from linguatime import session as picker
from linguatime.__main__ import main
from linguatime.cli import apply_command, render

from conftest import DEFAULT_PHRASES, REF, TZ


def fresh():
    return picker.initialize(phrases=DEFAULT_PHRASES, tz=TZ)


class TestApplyCommand:
    def test_typing_then_enter(self):
        state, msg = apply_command(fresh(), "next mon", now=REF)
        assert msg == ""
        assert state.dropdown_open
        state, msg = apply_command(state, ":enter", now=REF)
        assert msg == "Committed: Mar 18, 2024 2:30 PM"
        assert state.text_buffer == "Mar 18, 2024 2:30 PM"
        assert state.phase == picker.Phase.IDLE

    def test_pick_by_index(self):
        state, _ = apply_command(fresh(), ":focus", now=REF)
        state, msg = apply_command(state, ":pick 0", now=REF)
        assert msg == "Committed: Mar 16, 2024 2:30 PM"

    def test_pick_out_of_range(self):
        state, msg = apply_command(fresh(), ":pick 9", now=REF)
        assert msg == "No suggestion #9"

    def test_blur_clears_gibberish(self):
        state, _ = apply_command(fresh(), "gibberish", now=REF)
        state, msg = apply_command(state, ":blur", now=REF)
        assert msg == "Cleared"
        assert state.text_buffer == ""

    def test_set_and_clear(self):
        state, _ = apply_command(fresh(), ":set tomorrow", now=REF)
        assert state.text_buffer == "Mar 16, 2024 2:30 PM"
        state, _ = apply_command(state, ":clear", now=REF)
        assert state.committed_date is None

    def test_unknown_command(self):
        _, msg = apply_command(fresh(), ":jump", now=REF)
        assert msg == "Unknown command :jump"

    def test_render_marks_highlight(self):
        state, _ = apply_command(fresh(), ":focus", now=REF)
        out = render(state, now=REF)
        assert " > 0. Tomorrow" in out
        assert len(out.splitlines()) == 1 + len(DEFAULT_PHRASES)


class TestMain:
    def test_parse(self, capsys):
        code = main(["--tz", TZ, "--now", "2024-03-15T14:30:00", "parse", "in 3 days"])
        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["date"] == "2024-03-18T14:30:00+00:00"

    def test_parse_no_match(self, capsys):
        assert main(["--tz", TZ, "parse", "gibberish"]) == 1

    def test_suggest(self, capsys):
        main(["--tz", TZ, "--now", "2024-03-15T14:30:00", "suggest", "mon"])
        out = capsys.readouterr().out
        assert out.startswith("Next Monday")
        assert "Mar 18, 2024 2:30 PM" in out
