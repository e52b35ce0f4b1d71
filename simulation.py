"""
Projection engine: deterministic balance path plus seeded Monte Carlo bands.
Pure functions for simulation logic, decoupled from UI.

All Monte Carlo runs draw in sequence from one seeded generator, so the
bands are fully determined by (seed, runs) together with the scenario.
"""
import logging
import math
from typing import Dict, Tuple

import numpy as np

from calculations import MIN_ANNUAL_RATE
from deterministic import DeterministicProjector, month_labels, split_phase_lines
from models import SimulationParams, SimulationResult
from random_utils import box_muller, seeded_random


logger = logging.getLogger(__name__)

MC_RUNS_MIN = 50
MC_RUNS_MAX = 500
PERCENTILE_LEVELS = {'p10': 0.10, 'p50': 0.50, 'p90': 0.90}


class ProjectionSimulator:
    """Monte Carlo balance simulation with log-normal monthly growth"""

    def __init__(self, params: SimulationParams):
        self.params = params

    def _growth_parameters(self) -> Tuple[float, float]:
        """Monthly log mean and sigma matching the annual CAGR and volatility"""
        annual_rate = max(MIN_ANNUAL_RATE, self.params.selected_cagr / 100)
        mean_log = math.log(1 + annual_rate) / 12
        sigma = self.params.monte_carlo.volatility / 100 / math.sqrt(12)
        return mean_log, sigma

    def run_monte_carlo(self, months_accum: int, months_total: int) -> np.ndarray:
        """
        Replay the month loop for every run with stochastic growth.

        Args:
            months_accum: Length of the accumulation phase
            months_total: Accumulation plus withdrawal months

        Returns:
            Array of shape (runs, months_total + 1) with every run's balance
        """
        p = self.params
        runs = max(0, int(p.monte_carlo.runs))
        random_fn = seeded_random(p.monte_carlo.seed)
        mean_log, sigma = self._growth_parameters()

        paths = np.zeros((runs, months_total + 1))
        for run in range(runs):
            balance = p.start_capital
            paths[run, 0] = balance

            for month in range(1, months_total + 1):
                z = box_muller(random_fn)
                balance = balance * math.exp(mean_log + sigma * z)
                if month <= months_accum:
                    balance += p.contribution_monthly
                else:
                    balance -= p.selected_target
                paths[run, month] = balance

        logger.debug("Monte Carlo: %d runs x %d months (seed %s)",
                     runs, months_total, p.monte_carlo.seed)
        return paths


def calculate_percentiles(paths: np.ndarray) -> Dict[str, np.ndarray]:
    """
    Per-month P10/P50/P90 across runs by nearest-rank selection.

    For each month the runs are sorted and the value at index
    floor((n - 1) * q) is taken; no interpolation.
    """
    runs, months = paths.shape
    if runs == 0:
        return {name: np.zeros(months) for name in PERCENTILE_LEVELS}

    sorted_paths = np.sort(paths, axis=0)
    return {
        name: sorted_paths[math.floor((runs - 1) * q)]
        for name, q in PERCENTILE_LEVELS.items()
    }


def run_simulation(params: SimulationParams) -> SimulationResult:
    """
    Build a complete simulation with accumulation and withdrawal phases.

    Args:
        params: Simulation parameters (already sanitized)

    Returns:
        SimulationResult with balance paths, optional bands and metrics
    """
    projection = DeterministicProjector(params).run_projection()
    acc_line, withdraw_line = split_phase_lines(projection.balances, projection.months_accum)

    bands = {name: () for name in PERCENTILE_LEVELS}
    if params.monte_carlo.enabled:
        paths = ProjectionSimulator(params).run_monte_carlo(
            projection.months_accum, projection.months_total)
        bands = {name: tuple(float(v) for v in values)
                 for name, values in calculate_percentiles(paths).items()}

    return SimulationResult(
        labels=tuple(month_labels(projection.months_total)),
        acc_line=tuple(acc_line),
        withdraw_line=tuple(withdraw_line),
        p10=bands['p10'],
        p50=bands['p50'],
        p90=bands['p90'],
        months_accum=projection.months_accum,
        months_total=projection.months_total,
        end_balance=projection.end_balance,
        ruin_month=projection.ruin_month,
        auto_status=projection.auto_status,
    )
