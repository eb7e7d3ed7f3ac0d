# tests/utils/test_dates.py

from datetime import datetime, timedelta, UTC

import pytest

from fabtrack.utils.dates import days_ago_label, format_display_date, parse_timestamp, timeline_label

NOW = datetime(2025, 6, 15, 9, 30, tzinfo=UTC)


class TestDaysAgoLabel:
    """경과 일수 표시 (N days ago) 테스트 그룹"""

    def test_exactly_24_hours_before_is_one_day(self):
        assert days_ago_label(NOW - timedelta(hours=24), NOW) == "1 day ago"

    def test_same_instant_is_today(self):
        assert days_ago_label(NOW, NOW) == "Today"

    def test_partial_days_are_floored(self):
        assert days_ago_label(NOW - timedelta(hours=47), NOW) == "1 day ago"
        assert days_ago_label(NOW - timedelta(days=5, hours=3), NOW) == "5 days ago"

    def test_future_timestamp_is_today(self):
        assert days_ago_label(NOW + timedelta(days=2), NOW) == "Today"

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2025-13-45"])
    def test_missing_or_invalid(self, value):
        assert days_ago_label(value, NOW) == "Unknown"

    def test_iso_string_and_naive_values_are_utc(self):
        assert days_ago_label("2025-06-12T09:30:00Z", NOW) == "3 days ago"
        assert days_ago_label("2025-06-14T09:30:00", NOW) == "1 day ago"


class TestTimelineLabel:

    @pytest.mark.parametrize("delta, expected", [
        (timedelta(0), "Today"),
        (timedelta(hours=3), "1 day ago"),
        (timedelta(days=3), "3 days ago"),
        (timedelta(days=10), "2 weeks ago"),
        (timedelta(days=45), "2 months ago"),
    ])
    def test_labels(self, delta, expected):
        assert timeline_label(NOW - delta, NOW) == expected


def test_parse_timestamp_offset():
    parsed = parse_timestamp("2025-06-15T18:30:00+09:00")
    assert parsed == NOW


def test_format_display_date():
    assert format_display_date("2025-01-05T15:04:00+00:00") == "Jan 05, 2025"
    assert format_display_date("2025-01-05T15:04:00+00:00", with_time=True) == "Jan 05, 2025, 03:04 PM"
    assert format_display_date(None) == "—"
    assert format_display_date("garbage", fallback="Unknown") == "Unknown"
