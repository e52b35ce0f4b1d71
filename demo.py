#!/usr/bin/env python3
"""
Demo script showing how to use the withdrawal planner modules programmatically.
This demonstrates the core functionality without the Streamlit UI.
"""

from calculations import required_capital, solve_cagr
from calculator import CalculatorState
from formatting import format_currency, format_pct, format_years
from io_utils import create_state_download_json
from models import MonteCarloConfig, SimulationParams
from simulation import run_simulation


def main():
    print("🚀 Withdrawal Planner Demo")
    print("=" * 50)

    # 1. Required capital for a plan
    print("\n💰 Required capital (2,000 EUR/month for 15 years):")
    for cagr in (0, 5, 10):
        print(f"   at {cagr:>2}% CAGR: {format_currency(required_capital(2000, 15, cagr))}")

    # 2. Implied growth rate for a given start capital
    print("\n📈 Implied CAGR for 200k EUR funding 1,000 EUR/month over 20 years:")
    result = solve_cagr(200_000, 1000, 20)
    print(f"   {format_pct(result.cagr)} ({result.status})")

    # 3. Run a projection with Monte Carlo bands
    print("\n🎲 Projection (fixed 5-year contributions, then withdrawals)...")
    params = SimulationParams(
        start_capital=0,
        contribution_monthly=500,
        contribution_mode="fixed",
        contribution_years=5,
        selected_target=2000,
        selected_years=15,
        selected_cagr=10,
        monte_carlo=MonteCarloConfig(enabled=True, volatility=12, runs=200, seed=42),
    )
    sim = run_simulation(params)
    print(f"   Accumulation: {format_years(sim.months_accum)}, total {format_years(sim.months_total)}")
    print(f"   End balance: {format_currency(sim.end_balance)}")
    if sim.ruin_month is not None:
        print(f"   Runs out after {format_years(sim.ruin_month)}")
    print(f"   End balance P10/P50/P90: {format_currency(sim.p10[-1])} / "
          f"{format_currency(sim.p50[-1])} / {format_currency(sim.p90[-1])}")

    # 4. The calculator state drives the same engine for the UI
    print("\n📋 Calculator state (auto contribution mode):")
    state = CalculatorState()
    state.contribution.mode = "auto"
    state.refresh()
    print(f"   Required start: {format_currency(state.required_start)}")
    print(f"   Accumulation time: {state.auto_time_text}")
    print(f"   Runway: {state.runway_text}")

    # 5. State export demo
    print("\n💾 State Export Demo:")
    json_state = create_state_download_json(state)
    print(f"   State exported to JSON ({len(json_state)} characters)")

    print("\n✅ Demo completed successfully!")
    print("   To run the Streamlit UI: streamlit run app.py")
    print("   To run tests: python3 -m pytest tests/ -v")


if __name__ == "__main__":
    main()
