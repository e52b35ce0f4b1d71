"""
Closed-form annuity math and the implied-growth-rate solver.
Pure functions, no side effects; every domain edge case maps to a number or a status.
"""
import math
from dataclasses import dataclass


MAX_CAGR_PERCENT = 35.0
BISECTION_ITERATIONS = 40
MIN_ANNUAL_RATE = -0.95


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (not to even)"""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class CagrResult:
    """Implied growth rate needed to fund a withdrawal plan"""
    cagr: float
    status: str  # "normal", "overfunded" or "insufficient"


def annual_to_monthly_rate(annual_rate: float) -> float:
    """
    Convert an annual rate to the equivalent monthly compounding rate.

    Args:
        annual_rate: Annual rate as decimal (0.10 for 10%)

    Returns:
        Monthly rate as decimal
    """
    safe = max(MIN_ANNUAL_RATE, annual_rate)
    return (1 + safe) ** (1 / 12) - 1


def required_capital(monthly_withdrawal: float, years: float, cagr_percent: float) -> float:
    """
    Capital needed today to fund a fixed monthly withdrawal.

    Present value of an ordinary annuity: PMT * (1 - (1 + r)^-n) / r

    Args:
        monthly_withdrawal: Amount withdrawn each month
        years: Length of the withdrawal phase in years
        cagr_percent: Annual growth rate in percent (10 for 10%)

    Returns:
        Required starting capital
    """
    months = max(0, round_half_up(years * 12))
    if months == 0 or monthly_withdrawal <= 0:
        return 0.0

    monthly_rate = annual_to_monthly_rate(cagr_percent / 100)
    if abs(monthly_rate) < 1e-9:
        return monthly_withdrawal * months

    return monthly_withdrawal * (1 - (1 + monthly_rate) ** (-months)) / monthly_rate


def months_to_reach(start_capital: float, contribution_monthly: float,
                    cagr_percent: float, target_capital: float) -> float:
    """
    Months of growth plus contributions needed to reach a target balance.

    Args:
        start_capital: Balance at month 0
        contribution_monthly: Amount added at the end of each month
        cagr_percent: Annual growth rate in percent
        target_capital: Balance to reach

    Returns:
        Fractional number of months, or math.inf when the target is never reached
    """
    if target_capital <= start_capital:
        return 0.0

    monthly_rate = annual_to_monthly_rate(cagr_percent / 100)

    if abs(monthly_rate) < 1e-9:
        if contribution_monthly <= 0:
            return math.inf
        return (target_capital - start_capital) / contribution_monthly

    if contribution_monthly <= 0 and start_capital <= 0:
        return math.inf

    numerator = target_capital * monthly_rate + contribution_monthly
    denominator = start_capital * monthly_rate + contribution_monthly
    if numerator <= 0 or denominator <= 0:
        return math.inf

    return math.log(numerator / denominator) / math.log(1 + monthly_rate)


def solve_cagr(start_capital: float, monthly_withdrawal: float, years: float) -> CagrResult:
    """
    Bisection search for the growth rate at which start_capital exactly
    funds the withdrawal plan.

    Args:
        start_capital: Available capital
        monthly_withdrawal: Monthly withdrawal amount
        years: Length of the withdrawal phase in years

    Returns:
        CagrResult with the rate in percent and a status
    """
    if start_capital <= 0 or monthly_withdrawal <= 0 or years <= 0:
        return CagrResult(cagr=0.0, status="insufficient")

    pv_at_zero = required_capital(monthly_withdrawal, years, 0)
    if start_capital >= pv_at_zero:
        return CagrResult(cagr=0.0, status="overfunded")

    max_annual = MAX_CAGR_PERCENT / 100
    pv_at_max = required_capital(monthly_withdrawal, years, MAX_CAGR_PERCENT)
    if start_capital < pv_at_max:
        return CagrResult(cagr=MAX_CAGR_PERCENT, status="insufficient")

    low, high = 0.0, max_annual
    for _ in range(BISECTION_ITERATIONS):
        mid = (low + high) / 2
        pv = required_capital(monthly_withdrawal, years, mid * 100)
        # Capital still short at this rate: the answer lies higher
        if pv > start_capital:
            low = mid
        else:
            high = mid

    return CagrResult(cagr=(low + high) / 2 * 100, status="normal")
