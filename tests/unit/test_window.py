"""Unit tests for the historical window policy."""

from datetime import date, datetime, timedelta

import pytest

from fiscaltrail.adapters.clock import FixedClock
from fiscaltrail.domain.window import HistoricalWindowPolicy, coerce_date, shift_years


class TestShiftYears:
    """Tests for shift_years."""

    def test_regular_date(self) -> None:
        assert shift_years(date(2025, 6, 15), -10) == date(2015, 6, 15)

    def test_leap_day_rolls_over_to_march(self) -> None:
        assert shift_years(date(2024, 2, 29), 1) == date(2025, 3, 1)
        assert shift_years(date(2024, 2, 29), -10) == date(2014, 3, 1)

    def test_leap_day_to_leap_year(self) -> None:
        assert shift_years(date(2024, 2, 29), -4) == date(2020, 2, 29)


class TestCoerceDate:
    """Tests for coerce_date."""

    def test_date_passthrough(self) -> None:
        assert coerce_date(date(2020, 1, 1)) == date(2020, 1, 1)

    def test_datetime_uses_date_part(self) -> None:
        assert coerce_date(datetime(2020, 1, 1, 13, 30)) == date(2020, 1, 1)

    def test_iso_string(self) -> None:
        assert coerce_date("2020-01-01") == date(2020, 1, 1)

    def test_malformed_string(self) -> None:
        assert coerce_date("01/02/2020") is None

    def test_other_types(self) -> None:
        assert coerce_date(None) is None
        assert coerce_date(20200101) is None


class TestHistoricalWindowPolicy:
    """Tests for HistoricalWindowPolicy."""

    def test_minimum_and_maximum(self, policy: HistoricalWindowPolicy) -> None:
        assert policy.minimum_date() == date(2015, 6, 15)
        assert policy.maximum_date() == date(2026, 6, 15)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (date(2015, 6, 14), False),
            (date(2015, 6, 15), True),
            (date(2020, 1, 1), True),
            (date(2026, 6, 15), True),
            (date(2026, 6, 16), False),
        ],
    )
    def test_boundaries(
        self, policy: HistoricalWindowPolicy, value: date, expected: bool
    ) -> None:
        assert policy.is_in_window(value) is expected

    def test_matches_minimum_for_every_offset(self, policy: HistoricalWindowPolicy) -> None:
        minimum = policy.minimum_date()
        maximum = policy.maximum_date()
        day = minimum - timedelta(days=3)
        while day <= maximum + timedelta(days=3):
            assert policy.is_in_window(day) == (minimum <= day <= maximum)
            day += timedelta(days=97)

    def test_malformed_values_are_outside(self, policy: HistoricalWindowPolicy) -> None:
        assert policy.is_in_window(None) is False
        assert policy.is_in_window("not a date") is False
        assert policy.is_in_window(date(1970, 1, 1)) is False

    def test_recomputed_from_clock_on_every_call(self) -> None:
        clock = FixedClock(date(2025, 6, 15))
        policy = HistoricalWindowPolicy(clock)
        assert policy.is_in_window(date(2015, 7, 1)) is True

        clock.fixed = date(2026, 6, 15)
        assert policy.is_in_window(date(2015, 7, 1)) is False
        assert policy.minimum_date() == date(2016, 6, 15)

    def test_exercise_year_allowed(self, policy: HistoricalWindowPolicy) -> None:
        assert policy.exercise_year_allowed(2014) is False
        assert policy.exercise_year_allowed(2015) is True
        assert policy.exercise_year_allowed(2026) is True
        assert policy.exercise_year_allowed(2027) is False

    def test_reconstruction_years(self, policy: HistoricalWindowPolicy) -> None:
        years = policy.reconstruction_years()
        assert years == list(range(2015, 2026))
        assert len(years) == 11

    def test_custom_window_size(self, clock: FixedClock) -> None:
        policy = HistoricalWindowPolicy(clock, years_back=4, years_forward=0)
        assert policy.minimum_date() == date(2021, 6, 15)
        assert policy.maximum_date() == date(2025, 6, 15)
        assert policy.reconstruction_years() == [2021, 2022, 2023, 2024, 2025]
