"""
Tests for the canonical date formatter
"""
from linguatime.formatting import (
    format_date_only,
    format_date_time,
    formatter_for,
    is_valid_date_format,
    parse_canonical,
)

from conftest import REF, at


class TestFormat:
    def test_date_only(self):
        assert format_date_only(REF) == "Mar 15, 2024"

    def test_date_time(self):
        assert format_date_time(REF) == "Mar 15, 2024 2:30 PM"

    def test_midnight_and_noon(self):
        assert format_date_time(at(2024, 1, 5, 0, 0)) == "Jan 5, 2024 12:00 AM"
        assert format_date_time(at(2024, 1, 5, 12, 0)) == "Jan 5, 2024 12:00 PM"

    def test_formatter_for(self):
        assert formatter_for(True) is format_date_time
        assert formatter_for(False) is format_date_only


class TestCanonicalShape:
    def test_own_output_is_valid(self):
        assert is_valid_date_format(format_date_only(REF))
        assert is_valid_date_format(format_date_time(REF))

    def test_free_text_is_not_valid(self):
        assert not is_valid_date_format("tomorrow")
        assert not is_valid_date_format("")
        assert not is_valid_date_format("2024-03-15")
        assert not is_valid_date_format("Mar 15 2024")

    def test_impossible_dates_are_not_valid(self):
        assert not is_valid_date_format("Feb 30, 2024")
        assert not is_valid_date_format("Mar 15, 2024 13:00 PM")
        assert not is_valid_date_format("Mar 15, 2024 2:75 PM")

    def test_parse_canonical_attaches_zone(self):
        parsed = parse_canonical("Mar 15, 2024 2:30 PM", REF.tzinfo)
        assert parsed == REF

    def test_parse_canonical_date_only_is_midnight(self):
        assert parse_canonical("Mar 15, 2024", REF.tzinfo) == at(2024, 3, 15, 0, 0)
