"""
Deterministic balance projection using the selected CAGR (no randomness).
Resolves the accumulation phase length, then walks the balance month by month
through accumulation and withdrawal. Provides the baseline line of the chart.
"""
import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Tuple

import numpy as np

from calculations import annual_to_monthly_rate, months_to_reach, required_capital, round_half_up
from models import SimulationParams


logger = logging.getLogger(__name__)

CAP_MONTHS = 600  # 50 years


@dataclass(frozen=True)
class AccumulationPlan:
    """Length of the accumulation phase and how it was reached"""
    months: int
    status: str  # "reachable", "unreachable" or "overfunded"


@dataclass
class DeterministicResults:
    """Results from deterministic projection"""
    balances: np.ndarray
    months_accum: int
    months_total: int
    ruin_month: Optional[int]
    auto_status: str

    @property
    def end_balance(self) -> float:
        return float(self.balances[-1])


class DeterministicProjector:
    """Month-by-month projection at a constant monthly growth rate"""

    def __init__(self, params: SimulationParams):
        self.params = params

    def resolve_accumulation(self) -> AccumulationPlan:
        """
        Work out how many months contributions run before withdrawals start.

        Fixed mode uses the configured contribution years. Every other mode
        contributes until the balance covers the present value of the
        withdrawal plan, capped at CAP_MONTHS.
        """
        p = self.params
        if p.contribution_mode == "fixed":
            return AccumulationPlan(months=max(0, round_half_up(p.contribution_years * 12)),
                                    status="reachable")

        required_start = required_capital(p.selected_target, p.selected_years, p.selected_cagr)
        months_needed = months_to_reach(
            p.start_capital, p.contribution_monthly, p.selected_cagr, required_start)

        if not math.isfinite(months_needed) or months_needed > CAP_MONTHS:
            plan = AccumulationPlan(months=CAP_MONTHS, status="unreachable")
        elif months_needed <= 0:
            plan = AccumulationPlan(months=0, status="overfunded")
        else:
            plan = AccumulationPlan(months=math.ceil(months_needed), status="reachable")

        logger.debug("Accumulation needs %s months for %.2f required start -> %s",
                     months_needed, required_start, plan)
        return plan

    def run_projection(self) -> DeterministicResults:
        """Run deterministic projection"""
        p = self.params
        plan = self.resolve_accumulation()
        monthly_rate = annual_to_monthly_rate(p.selected_cagr / 100)
        withdrawal_months = max(0, round_half_up(p.selected_years * 12))
        total_months = plan.months + withdrawal_months

        balances = np.zeros(total_months + 1)
        balance = p.start_capital
        balances[0] = balance
        ruin_month = None

        for month in range(1, total_months + 1):
            balance = balance * (1 + monthly_rate)
            if month <= plan.months:
                balance += p.contribution_monthly
            else:
                balance -= p.selected_target
            balances[month] = balance

            # Shortfall is recorded once; the draw-down keeps running past it
            if ruin_month is None and balance < 0:
                ruin_month = month

        return DeterministicResults(
            balances=balances,
            months_accum=plan.months,
            months_total=total_months,
            ruin_month=ruin_month,
            auto_status=plan.status,
        )


def split_phase_lines(balances: np.ndarray,
                      months_accum: int) -> Tuple[List[Optional[float]], List[Optional[float]]]:
    """
    Split a balance path into accumulation and withdrawal lines.

    Each line holds the balance on its own phase and None elsewhere; the
    boundary month appears in both so the chart line stays continuous.
    """
    acc_line = [float(value) if month <= months_accum else None
                for month, value in enumerate(balances)]
    withdraw_line = [float(value) if month >= months_accum else None
                     for month, value in enumerate(balances)]
    return acc_line, withdraw_line


def month_labels(months_total: int) -> List[str]:
    """Year-fraction label for every month including month 0 (halves round up)"""
    tenth = Decimal("0.1")
    return [str(Decimal(month / 12).quantize(tenth, rounding=ROUND_HALF_UP))
            for month in range(months_total + 1)]
