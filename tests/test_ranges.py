"""
Unit tests for scenario grids, snapping and range sanitization.
"""
import math

import pytest

from ranges import (
    RangeConfig, SelectedScenario, finite_or, make_range, sanitize_ranges, snap, snap_scenario
)


class TestMakeRange:
    """Test discrete grid generation"""

    def test_basic_grid(self):
        assert make_range(1000, 3000, 500) == [1000, 1500, 2000, 2500, 3000]

    def test_fractional_step_has_no_float_drift(self):
        values = make_range(0, 1, 0.1)
        assert len(values) == 11
        assert values[3] == 0.3
        assert values[-1] == 1.0

    def test_max_off_grid_is_truncated(self):
        assert make_range(10, 20, 4) == [10, 14, 18]

    def test_non_positive_step_defaults_to_one(self):
        assert make_range(1, 3, 0) == [1, 2, 3]
        assert make_range(1, 3, -2) == [1, 2, 3]

    def test_non_finite_bounds(self):
        assert make_range(math.nan, 2, 1) == [0, 1, 2]
        assert make_range(5, math.inf, 1) == [5]

    def test_max_below_min_is_empty(self):
        assert make_range(10, 5, 1) == []

    @pytest.mark.parametrize("lo,hi,step,expected", [
        (0.2, 0.7, 0.5, [0.2, 0.7]),
        (0.1, 4.1, 0.5, [0.1, 0.6, 1.1, 1.6, 2.1, 2.6, 3.1, 3.6, 4.1]),
        (0.3, 0.9, 0.3, [0.3, 0.6, 0.9]),
    ])
    def test_max_on_grid_up_to_float_error(self, lo, hi, step, expected):
        assert make_range(lo, hi, step) == expected

    @pytest.mark.parametrize("lo,hi,step", [
        (1000, 3000, 500), (10, 20, 5), (5, 20, 2.5), (0.5, 7.25, 0.5), (3, 100, 7),
    ])
    def test_strictly_increasing_with_exact_step(self, lo, hi, step):
        values = make_range(lo, hi, step)
        assert len(values) == math.floor((hi - lo) / step) + 1
        for earlier, later in zip(values, values[1:]):
            assert later > earlier
            assert later - earlier == pytest.approx(step, abs=1e-6)

    def test_restartable(self):
        assert make_range(5, 20, 5) == make_range(5, 20, 5)


class TestSnap:
    """Test snapping a value onto its grid"""

    def test_rounds_to_nearest_grid_point(self):
        assert snap(1234, 1000, 3000, 500) == 1000
        assert snap(1300, 1000, 3000, 500) == 1500
        assert snap(2750, 1000, 3000, 500) == 3000

    def test_clamps_to_bounds(self):
        assert snap(5000, 1000, 3000, 500) == 3000
        assert snap(-1, 1000, 3000, 500) == 1000

    def test_zero_step_only_clamps(self):
        assert snap(7.3, 0, 10, 0) == 7.3
        assert snap(12, 0, 10, 0) == 10

    def test_grid_offset_from_min(self):
        assert snap(9, 2, 20, 5) == 7

    def test_off_grid_max_stays_in_bounds(self):
        assert snap(10, 0, 10, 4) == 8

    @pytest.mark.parametrize("lo,hi,step", [
        (1000, 3000, 500), (0, 10, 4), (5, 20, 2.5), (0, 1, 0.1), (3, 100, 7),
    ])
    def test_idempotent_and_bounded(self, lo, hi, step):
        for i in range(-20, 120):
            value = lo + (hi - lo) * i / 100
            once = snap(value, lo, hi, step)
            assert lo <= once <= hi
            assert snap(once, lo, hi, step) == once

    def test_max_on_grid_up_to_float_error(self):
        assert snap(5, 0.2, 0.7, 0.5) == 0.7
        assert snap(0.7, 0.2, 0.7, 0.5) == 0.7

    @pytest.mark.parametrize("lo,hi,step", [
        (0.2, 0.7, 0.5), (0.1, 4.1, 0.5), (0.3, 0.9, 0.3), (0.7, 5.2, 1.5),
        (1.1, 6.1, 2.5), (0, 10, 4), (0, 1, 0.1), (5, 20, 2.5),
    ])
    def test_result_is_a_grid_value(self, lo, hi, step):
        grid = make_range(lo, hi, step)
        for i in range(-20, 121):
            value = lo + (hi - lo) * i / 100
            assert snap(value, lo, hi, step) in grid


class TestFiniteOr:
    """Test numeric fallback for missing or invalid values"""

    @pytest.mark.parametrize("value", [None, "x", math.nan, math.inf, -math.inf, [1]])
    def test_falls_back(self, value):
        assert finite_or(value, 3) == 3

    def test_numbers_and_numeric_strings(self):
        assert finite_or(7, 3) == 7
        assert finite_or(-2.5, 3) == -2.5
        assert finite_or("4.5", 3) == 4.5


class TestSanitizeRanges:
    """Test range sanitization"""

    def test_valid_ranges_unchanged(self):
        ranges = RangeConfig()
        assert sanitize_ranges(ranges) == ranges

    def test_swaps_inverted_bounds(self):
        ranges = sanitize_ranges(RangeConfig(target_min=3000, target_max=1000))
        assert (ranges.target_min, ranges.target_max) == (1000, 3000)

    def test_step_minimums(self):
        ranges = sanitize_ranges(RangeConfig(target_step=-500, years_step=0, cagr_step=0.1))
        assert ranges.target_step == 500
        assert ranges.years_step == 1
        assert ranges.cagr_step == 0.5

    def test_non_finite_fallbacks(self):
        ranges = sanitize_ranges(RangeConfig(
            target_min=math.nan, target_max=math.inf,
            years_min=math.nan, years_max=math.nan,
            cagr_min=2, cagr_max=math.nan, cagr_step=math.nan,
        ))
        assert (ranges.target_min, ranges.target_max) == (0, 0)
        assert (ranges.years_min, ranges.years_max) == (1, 1)
        assert (ranges.cagr_min, ranges.cagr_max, ranges.cagr_step) == (2, 2, 1)

    def test_does_not_mutate_input(self):
        original = RangeConfig(target_min=3000, target_max=1000)
        sanitize_ranges(original)
        assert original.target_min == 3000


class TestSnapScenario:
    """Test snapping the selected scenario"""

    def test_snaps_every_field(self):
        selected = snap_scenario(SelectedScenario(target=2100, years=40, cagr=7.4), RangeConfig())
        assert selected == SelectedScenario(target=2000, years=20, cagr=5)

    def test_grid_points_unchanged(self):
        assert snap_scenario(SelectedScenario(), RangeConfig()) == SelectedScenario()

    def test_missing_values_use_defaults(self):
        selected = snap_scenario(SelectedScenario(target=None, years="soon", cagr=math.nan),
                                 RangeConfig())
        assert selected == SelectedScenario(target=2000, years=15, cagr=10)

    def test_missing_value_default_is_snapped(self):
        selected = snap_scenario(SelectedScenario(cagr=None), RangeConfig(cagr_min=12, cagr_max=30))
        assert selected.cagr == 12


class TestSanitizeRangesNulls:
    """Test ranges holding None or text instead of numbers"""

    def test_none_bounds_and_steps(self):
        ranges = sanitize_ranges(RangeConfig(target_min=None, target_max=None,
                                             years_step=None, cagr_max="high"))
        assert (ranges.target_min, ranges.target_max) == (0, 0)
        assert ranges.years_step == 1
        assert ranges.cagr_max == ranges.cagr_min == 5
