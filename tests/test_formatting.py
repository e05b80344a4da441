from __future__ import annotations

from datetime import date, datetime, time

import pytest

from rental_admin.formatting import format_date, format_time


class TestFormatDate:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (date(2026, 6, 1), "6/1/2026"),
            (datetime(2026, 12, 25, 23, 59), "12/25/2026"),
            ("2026-03-09", "3/9/2026"),
            ("2026-03-09T08:00:00", "3/9/2026"),
            (None, "N/A"),
            ("", "N/A"),
            ("not a date", "N/A"),
        ],
    )
    def test_format_date(self, value, expected):
        assert format_date(value) == expected


class TestFormatTime:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (time(14, 30), "2:30 PM"),
            (time(0, 5), "12:05 AM"),
            (time(12, 0), "12:00 PM"),
            (time(9, 30), "9:30 AM"),
            ("14:30", "2:30 PM"),
            ("08:15:42", "8:15 AM"),
            (None, "N/A"),
            ("", "N/A"),
            ("noon", "N/A"),
            ("25:00", "N/A"),
        ],
    )
    def test_format_time(self, value, expected):
        assert format_time(value) == expected
