"""Unit tests for craving average/trend computation."""

import pytest

from apaddicto.progress.craving_service import _clean_tags, _validate_intensity, compute_craving_trend, round_half_up
from apaddicto.errors import ValidationError


class TestComputeCravingTrend:
    def test_no_entries(self):
        assert compute_craving_trend([]) == {"average": 0, "trend": 0}

    def test_single_entry_has_no_trend(self):
        assert compute_craving_trend([7]) == {"average": 7.0, "trend": 0}

    def test_decreasing_cravings(self):
        assert compute_craving_trend([8, 8, 2, 2]) == {"average": 5.0, "trend": -75}

    def test_increasing_cravings(self):
        assert compute_craving_trend([2, 4]) == {"average": 3.0, "trend": 100}

    def test_odd_count_puts_extra_entry_in_second_half(self):
        # first half [4], second half [4, 7] -> 5.5 vs 4 -> +37.5% -> 38
        assert compute_craving_trend([4, 4, 7]) == {"average": 5.0, "trend": 38}

    def test_zero_first_half_gives_zero_trend(self):
        assert compute_craving_trend([0, 0, 5, 5]) == {"average": 2.5, "trend": 0}

    def test_average_rounded_to_one_decimal(self):
        assert compute_craving_trend([1, 2, 2])["average"] == 1.7


class TestRounding:
    @pytest.mark.parametrize(
        ("value", "ndigits", "expected"),
        [(2.5, 0, 3), (-2.5, 0, -2), (-37.5, 0, -37), (1.25, 1, 1.3), (4.44, 1, 4.4)],
    )
    def test_round_half_up(self, value, ndigits, expected):
        assert round_half_up(value, ndigits) == pytest.approx(expected)


class TestCravingInput:
    @pytest.mark.parametrize("value", [0, 5, 10])
    def test_valid_intensity(self, value):
        assert _validate_intensity(value) == value

    @pytest.mark.parametrize("value", [-1, 11, 5.5, "5", None, True])
    def test_invalid_intensity(self, value):
        with pytest.raises(ValidationError):
            _validate_intensity(value)

    def test_tags_are_deduplicated_in_order(self):
        assert _clean_tags(["stress", " stress ", "", "ennui", "stress"]) == ["stress", "ennui"]
        assert _clean_tags(None) == []
