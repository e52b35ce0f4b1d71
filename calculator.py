"""
Calculator state owned by the caller.

Holds the four editable config structs plus the theme and the last
simulation result. The caller decides when to recompute: sanitize the
inputs, then run the simulation (refresh), or hand the work to a
SimulationScheduler when it should run off the UI thread.
"""
import logging
import math
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import pandas as pd

from calculations import CagrResult, required_capital, round_half_up, solve_cagr
from charts import get_chart_palette, required_capital_frame
from config_utils import THEMES
from formatting import format_number, format_pct, format_years
from models import (
    CONTRIBUTION_MODES,
    ContributionConfig,
    MonteCarloConfig,
    SimulationParams,
    SimulationResult,
)
from random_utils import MASK_32
from ranges import (
    RangeConfig, SelectedScenario, finite_or, make_range, sanitize_ranges, snap_scenario
)
from simulation import MC_RUNS_MAX, MC_RUNS_MIN, run_simulation


logger = logging.getLogger(__name__)

DEFAULT_RUNS = 200
DEFAULT_SEED = 42

SimulationRunner = Callable[[SimulationParams], SimulationResult]

_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off", "")


def _as_bool(value: Any, fallback: bool) -> bool:
    """Booleans pass through; strings like "false" and finite numbers are parsed"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return fallback
    if isinstance(value, (int, float)) and math.isfinite(value):
        return bool(value)
    return fallback


@dataclass(frozen=True)
class MatrixBounds:
    """Smallest and largest required capital over the grid, for color scaling"""
    min: float
    max: float


@dataclass
class CalculatorState:
    """Editable inputs and the last result of the planner"""
    ranges: RangeConfig = field(default_factory=RangeConfig)
    selected: SelectedScenario = field(default_factory=SelectedScenario)
    contribution: ContributionConfig = field(default_factory=ContributionConfig)
    monte_carlo: MonteCarloConfig = field(default_factory=MonteCarloConfig)
    theme: str = 'dark'
    simulation: SimulationResult = field(default_factory=SimulationResult)

    # === ACTIONS ===

    def sanitize_inputs(self) -> None:
        """Clamp every input into its valid domain and snap the selection to the grids"""
        self.ranges = sanitize_ranges(self.ranges)
        self.selected = snap_scenario(self.selected, self.ranges)

        c = self.contribution
        c.start_capital = max(0.0, finite_or(c.start_capital, 0))
        c.amount = max(0.0, finite_or(c.amount, 0))
        c.years = max(0.0, finite_or(c.years, 0))
        if c.frequency not in ("monthly", "yearly"):
            logger.debug("Unknown contribution frequency %r, using monthly", c.frequency)
            c.frequency = "monthly"
        if c.mode not in CONTRIBUTION_MODES:
            logger.debug("Unknown contribution mode %r, using stop", c.mode)
            c.mode = "stop"

        mc = self.monte_carlo
        mc.enabled = _as_bool(mc.enabled, False)
        mc.volatility = max(0.0, finite_or(mc.volatility, 0))
        mc.runs = min(MC_RUNS_MAX, max(MC_RUNS_MIN, round_half_up(finite_or(mc.runs, DEFAULT_RUNS))))
        mc.seed = int(finite_or(mc.seed, DEFAULT_SEED)) & MASK_32

    def build_params(self) -> SimulationParams:
        """Flatten the state into the simulation input"""
        return SimulationParams(
            start_capital=self.contribution.start_capital,
            contribution_monthly=self.contribution_monthly,
            contribution_mode=self.contribution.mode,
            contribution_years=self.contribution.years,
            selected_target=self.selected.target,
            selected_years=self.selected.years,
            selected_cagr=self.selected.cagr,
            monte_carlo=MonteCarloConfig(
                enabled=self.monte_carlo.enabled,
                volatility=self.monte_carlo.volatility,
                runs=self.monte_carlo.runs,
                seed=self.monte_carlo.seed,
            ),
        )

    def run_simulation(self, runner: Optional[SimulationRunner] = None) -> SimulationResult:
        """Recompute the result, optionally through a caching or remote runner"""
        self.simulation = (runner or run_simulation)(self.build_params())
        return self.simulation

    def refresh(self, runner: Optional[SimulationRunner] = None) -> SimulationResult:
        """Sanitize inputs, then recompute the simulation"""
        self.sanitize_inputs()
        return self.run_simulation(runner)

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme {theme!r}, expected one of {THEMES}")
        self.theme = theme

    def toggle_theme(self) -> None:
        self.set_theme('light' if self.theme == 'dark' else 'dark')

    # === DERIVED VALUES ===

    @property
    def targets(self) -> List[float]:
        r = self.ranges
        return make_range(r.target_min, r.target_max, r.target_step)

    @property
    def years_list(self) -> List[float]:
        r = self.ranges
        return make_range(r.years_min, r.years_max, r.years_step)

    @property
    def cagr_list(self) -> List[float]:
        r = self.ranges
        return make_range(r.cagr_min, r.cagr_max, r.cagr_step)

    @property
    def contribution_monthly(self) -> float:
        return self.contribution.monthly_amount

    @property
    def required_start(self) -> float:
        return required_capital(self.selected.target, self.selected.years, self.selected.cagr)

    @property
    def total_withdrawals(self) -> float:
        return self.selected.target * self.selected.years * 12

    @property
    def required_cagr_result(self) -> CagrResult:
        """Growth rate the start capital needs if withdrawals started today"""
        return solve_cagr(self.contribution.start_capital, self.selected.target, self.selected.years)

    @property
    def required_cagr_text(self) -> str:
        result = self.required_cagr_result
        if result.status == 'insufficient' and self.contribution.start_capital <= 0:
            return 'n/a'
        if result.status == 'overfunded':
            return '0% (overfunded)'
        if result.status == 'insufficient':
            return '> ' + format_pct(result.cagr)
        return format_pct(result.cagr)

    @property
    def required_cagr_meta(self) -> str:
        result = self.required_cagr_result
        if result.status == 'insufficient' and self.contribution.start_capital <= 0:
            return 'enter starting capital'
        if result.status == 'overfunded':
            return 'overfunded at 0% growth'
        return 'if withdrawals started today'

    @property
    def cagr_status(self) -> str:
        """Success when the selected CAGR covers the required one, else warning"""
        result = self.required_cagr_result
        if result.status == 'overfunded':
            return 'success'
        if result.status == 'insufficient':
            return 'warning'
        if result.cagr <= self.selected.cagr:
            return 'success'
        return 'warning'

    @property
    def auto_time_text(self) -> str:
        if self.contribution.mode == 'fixed':
            return f"{format_number(self.contribution.years)}y (fixed)"
        if self.simulation.auto_status == 'unreachable':
            return '> 50y (not reached)'
        return format_years(self.simulation.months_accum)

    @property
    def runway_text(self) -> str:
        if self.simulation.ruin_month is None:
            return 'survives full horizon'
        return 'runs out in ' + format_years(self.simulation.ruin_month)

    @property
    def required_capital_matrix(self) -> pd.DataFrame:
        """Required capital per (years, target) cell at the selected CAGR"""
        return required_capital_frame(self.targets, self.years_list, self.selected.cagr)

    @property
    def matrix_bounds(self) -> MatrixBounds:
        matrix = self.required_capital_matrix
        if matrix.size == 0:
            return MatrixBounds(min=0.0, max=1.0)
        values = matrix.to_numpy()
        return MatrixBounds(min=float(values.min()), max=float(values.max()))

    @property
    def chart_palette(self) -> List[str]:
        return get_chart_palette(self.theme)


class SimulationScheduler:
    """
    Runs simulations off the caller's thread with last-writer-wins semantics.

    Every submit() supersedes earlier ones: a result is committed to the
    single `latest` slot only if no newer request has been submitted since.
    """

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None, max_workers: int = 2):
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers)
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[SimulationResult] = None
        self._pending: Optional[Tuple[int, Future]] = None

    def submit(self, params: SimulationParams) -> Future:
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous = self._pending

        # Not started yet: no point running it
        if previous is not None:
            previous[1].cancel()

        future = self._executor.submit(run_simulation, params)
        with self._lock:
            if generation == self._generation:
                self._pending = (generation, future)
        future.add_done_callback(lambda f: self._commit(generation, f))
        return future

    def _commit(self, generation: int, future: Future) -> None:
        if future.cancelled():
            logger.debug("Simulation request %d cancelled", generation)
            return
        error = future.exception()
        if error is not None:
            logger.error("Simulation request %d failed: %s", generation, error)
            return
        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale simulation result %d (latest is %d)",
                             generation, self._generation)
                return
            self._latest = future.result()

    @property
    def latest(self) -> Optional[SimulationResult]:
        with self._lock:
            return self._latest

    def wait(self, timeout: Optional[float] = None) -> Optional[SimulationResult]:
        """Block until the most recent request has finished and return the committed result"""
        with self._lock:
            pending = self._pending
        if pending is not None:
            generation, future = pending
            future.result(timeout=timeout)
            self._commit(generation, future)
        return self.latest

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)
