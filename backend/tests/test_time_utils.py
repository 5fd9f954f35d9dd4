"""
Date range parsing tests.

A date-only upper bound covers its whole day; anything with a time part is
taken as given.
"""

import sys
from datetime import datetime

import pytest

from stockpos.time_utils import parse_range_bound, to_utc_z


END_OF_MARCH_5 = datetime(2024, 3, 5, 23, 59, 59, 999999)


class TestParseRangeBound:
    def test_date_only_end_bound_covers_whole_day(self):
        assert parse_range_bound("2024-03-05", end=True) == END_OF_MARCH_5
        assert parse_range_bound(" 2024-03-05 ", end=True) == END_OF_MARCH_5

    def test_date_only_start_bound_is_midnight(self):
        assert parse_range_bound("2024-03-05") == datetime(2024, 3, 5)

    def test_explicit_time_is_not_widened(self):
        assert parse_range_bound("2024-03-05T10:30", end=True) == datetime(2024, 3, 5, 10, 30)
        assert parse_range_bound("2024-03-05T00:00:00Z", end=True) == datetime(2024, 3, 5)

    def test_offset_is_converted_to_utc(self):
        assert parse_range_bound("2024-03-05T10:00+02:00", end=True) == datetime(2024, 3, 5, 8, 0)

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="basic ISO dates need Python 3.11")
    def test_basic_format_date_end_bound_covers_whole_day(self):
        assert parse_range_bound("20240305", end=True) == END_OF_MARCH_5

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank_is_unbounded(self, value):
        assert parse_range_bound(value, end=True) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_range_bound("not-a-date", end=True)


def test_to_utc_z_drops_microseconds():
    assert to_utc_z(datetime(2024, 3, 5, 8, 0, 1, 500)) == "2024-03-05T08:00:01Z"
    assert to_utc_z(None) is None
