"""
Discrete parameter grids for the target / years / CAGR selectors.
Builds the grid values shown in the UI and snaps a selection onto its grid.
"""
import logging
import math
from dataclasses import dataclass, replace
from typing import Any, List


logger = logging.getLogger(__name__)

DECIMALS = 6
# (max - min) / step is rounded to this many places before flooring, so a
# bound that sits on the grid up to float error still counts as a grid point
COUNT_DECIMALS = 9


@dataclass
class RangeConfig:
    """Bounds and step sizes of the three scenario grids"""
    target_min: float = 1000
    target_max: float = 3000
    target_step: float = 500
    years_min: float = 10
    years_max: float = 20
    years_step: float = 5
    cagr_min: float = 5
    cagr_max: float = 20
    cagr_step: float = 5


@dataclass
class SelectedScenario:
    """A point inside the grids: monthly target, withdrawal years, CAGR percent"""
    target: float = 2000
    years: float = 15
    cagr: float = 10


def finite_or(value: Any, fallback: float) -> float:
    """value as a float, or fallback when it is missing, non-numeric or non-finite"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def _grid_count(start: float, end: float, step: float) -> int:
    return math.floor(round((end - start) / step, COUNT_DECIMALS)) + 1


def _grid_point(start: float, step: float, index: int) -> float:
    return round(start + step * index, DECIMALS)


def make_range(min_value: float, max_value: float, step: float) -> List[float]:
    """
    Build the ordered grid min, min+step, ... up to max.

    Args:
        min_value: First grid value (non-finite falls back to 0)
        max_value: Upper bound (non-finite falls back to min_value)
        step: Grid spacing (non-positive falls back to 1)

    Returns:
        List of values rounded to 6 decimals
    """
    clean_step = step if step > 0 else 1
    start = min_value if math.isfinite(min_value) else 0
    end = max_value if math.isfinite(max_value) else start
    count = _grid_count(start, end, clean_step)
    return [_grid_point(start, clean_step, i) for i in range(max(0, count))]


def snap(value: float, min_value: float, max_value: float, step: float) -> float:
    """
    Clamp value into [min, max] and round it to the nearest grid point.

    The result is always one of make_range(min, max, step); when max is off
    the grid, values near it go to the last grid point below it.
    """
    clamped = min(max_value, max(min_value, value))
    if not step:
        return clamped
    clean_step = step if step > 0 else 1
    last = max(0, _grid_count(min_value, max_value, clean_step) - 1)
    index = math.floor((clamped - min_value) / clean_step + 0.5)
    return _grid_point(min_value, clean_step, min(max(index, 0), last))


def _sanitize_pair(min_value: float, max_value: float, step: float,
                   min_fallback: float, min_step: float):
    lo = finite_or(min_value, min_fallback)
    hi = finite_or(max_value, lo)
    clean_step = max(min_step, abs(finite_or(step, 1)))
    if lo > hi:
        lo, hi = hi, lo
    return lo, hi, clean_step


def sanitize_ranges(ranges: RangeConfig) -> RangeConfig:
    """
    Return a copy of ranges with finite bounds, min <= max and usable steps.

    Steps are at least 1 for targets and years and at least 0.5 for CAGR.
    """
    target_min, target_max, target_step = _sanitize_pair(
        ranges.target_min, ranges.target_max, ranges.target_step, 0, 1)
    years_min, years_max, years_step = _sanitize_pair(
        ranges.years_min, ranges.years_max, ranges.years_step, 1, 1)
    cagr_min, cagr_max, cagr_step = _sanitize_pair(
        ranges.cagr_min, ranges.cagr_max, ranges.cagr_step, 0, 0.5)

    sanitized = RangeConfig(
        target_min=target_min, target_max=target_max, target_step=target_step,
        years_min=years_min, years_max=years_max, years_step=years_step,
        cagr_min=cagr_min, cagr_max=cagr_max, cagr_step=cagr_step,
    )
    if sanitized != ranges:
        logger.debug("Sanitized ranges %s -> %s", ranges, sanitized)
    return sanitized


def snap_scenario(selected: SelectedScenario, ranges: RangeConfig) -> SelectedScenario:
    """Snap every field of the selected scenario onto its (sanitized) grid"""
    defaults = SelectedScenario()
    target = finite_or(selected.target, defaults.target)
    years = finite_or(selected.years, defaults.years)
    cagr = finite_or(selected.cagr, defaults.cagr)
    return replace(
        selected,
        target=snap(target, ranges.target_min, ranges.target_max, ranges.target_step),
        years=snap(years, ranges.years_min, ranges.years_max, ranges.years_step),
        cagr=snap(cagr, ranges.cagr_min, ranges.cagr_max, ranges.cagr_step),
    )
