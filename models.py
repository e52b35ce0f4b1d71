"""
Input and result types shared by the projection engine.
Kept apart from the engine modules so deterministic and Monte Carlo code can
both import them.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple


CONTRIBUTION_MODES = ("auto", "stop", "continue", "fixed")


@dataclass
class ContributionConfig:
    """Savings that build the balance before withdrawals start"""
    start_capital: float = 0
    amount: float = 500
    frequency: str = "monthly"  # "monthly" or "yearly"
    mode: str = "stop"  # "auto", "stop", "continue" or "fixed"
    years: float = 5

    @property
    def monthly_amount(self) -> float:
        if self.frequency == "yearly":
            return self.amount / 12
        return self.amount


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation"""
    enabled: bool = False
    volatility: float = 12  # annualized %, log-normal sigma basis
    runs: int = 200
    seed: int = 42


@dataclass
class SimulationParams:
    """Parameters for one projection run"""
    start_capital: float = 0
    contribution_monthly: float = 500
    contribution_mode: str = "stop"
    contribution_years: float = 5
    selected_target: float = 2000
    selected_years: float = 15
    selected_cagr: float = 10
    monte_carlo: MonteCarloConfig = field(default_factory=MonteCarloConfig)


@dataclass(frozen=True)
class SimulationResult:
    """Balance paths and metrics from one projection run"""
    labels: Tuple[str, ...] = ()
    acc_line: Tuple[Optional[float], ...] = ()
    withdraw_line: Tuple[Optional[float], ...] = ()
    p10: Tuple[float, ...] = ()
    p50: Tuple[float, ...] = ()
    p90: Tuple[float, ...] = ()
    months_accum: int = 0
    months_total: int = 0
    end_balance: float = 0.0
    ruin_month: Optional[int] = None
    auto_status: str = "reachable"

    @property
    def has_bands(self) -> bool:
        return len(self.p50) > 0
