"""
Streamlit web application for the retirement withdrawal planner.
Configure the withdrawal scenario, contributions and Monte Carlo settings,
then view required capital, runway and the projected balance path.
"""
from dataclasses import asdict
from typing import Any, Dict

import streamlit as st

# Import our modules
from calculator import CalculatorState
from charts import create_balance_path_chart, create_required_capital_matrix
from config_utils import configure_logging, load_ui_config, save_ui_config
from formatting import format_currency
from io_utils import (
    create_state_download_json, parse_state_upload_json, validate_state_json,
    export_balance_path_csv, export_required_capital_matrix_csv,
    create_summary_report, export_summary_report_json
)
from models import MonteCarloConfig, SimulationParams, SimulationResult
from simulation import run_simulation


# Streamlit reruns the script on every widget change; identical inputs reuse the last result
@st.cache_data(show_spinner=False, max_entries=32)
def _cached_simulation(params_dict: Dict[str, Any]) -> SimulationResult:
    monte_carlo = MonteCarloConfig(**params_dict['monte_carlo'])
    return run_simulation(SimulationParams(**{**params_dict, 'monte_carlo': monte_carlo}))


def cached_simulation(params: SimulationParams) -> SimulationResult:
    """run_simulation through the Streamlit data cache"""
    return _cached_simulation(asdict(params))


def initialize_session_state():
    """Create the calculator state once per session"""
    if 'calculator' not in st.session_state:
        state = CalculatorState()
        ui_config = load_ui_config()
        if ui_config.get('theme') in ('light', 'dark'):
            state.theme = ui_config['theme']
        if 'monte_carlo_runs' in ui_config:
            state.monte_carlo.runs = ui_config['monte_carlo_runs']
        state.refresh(cached_simulation)
        st.session_state.calculator = state


def create_sidebar(state: CalculatorState):
    """Sidebar inputs; every widget writes straight into the calculator state"""
    st.sidebar.title("Withdrawal Planner")

    st.sidebar.header("Scenario")
    r = state.ranges
    state.selected.target = st.sidebar.select_slider(
        "Monthly withdrawal (EUR)", options=state.targets, value=state.selected.target)
    state.selected.years = st.sidebar.select_slider(
        "Withdrawal years", options=state.years_list, value=state.selected.years)
    state.selected.cagr = st.sidebar.select_slider(
        "CAGR (%)", options=state.cagr_list, value=state.selected.cagr)

    with st.sidebar.expander("Grid bounds", expanded=False):
        col1, col2, col3 = st.columns(3)
        r.target_min = col1.number_input("Target min", value=float(r.target_min), step=100.0)
        r.target_max = col2.number_input("Target max", value=float(r.target_max), step=100.0)
        r.target_step = col3.number_input("Target step", value=float(r.target_step), step=100.0)
        r.years_min = col1.number_input("Years min", value=float(r.years_min), step=1.0)
        r.years_max = col2.number_input("Years max", value=float(r.years_max), step=1.0)
        r.years_step = col3.number_input("Years step", value=float(r.years_step), step=1.0)
        r.cagr_min = col1.number_input("CAGR min", value=float(r.cagr_min), step=0.5)
        r.cagr_max = col2.number_input("CAGR max", value=float(r.cagr_max), step=0.5)
        r.cagr_step = col3.number_input("CAGR step", value=float(r.cagr_step), step=0.5)

    st.sidebar.header("Contributions")
    c = state.contribution
    c.start_capital = st.sidebar.number_input(
        "Starting capital (EUR)", min_value=0.0, value=float(c.start_capital), step=1000.0)
    c.amount = st.sidebar.number_input(
        "Contribution (EUR)", min_value=0.0, value=float(c.amount), step=50.0)
    c.frequency = st.sidebar.radio(
        "Frequency", ["monthly", "yearly"], index=["monthly", "yearly"].index(c.frequency),
        horizontal=True)
    modes = ["stop", "continue", "fixed"]
    c.mode = st.sidebar.selectbox(
        "Contribution mode", modes, index=modes.index(c.mode) if c.mode in modes else 0,
        help="stop/continue: contribute until the required capital is reached; "
             "fixed: contribute for a set number of years")
    if c.mode == "fixed":
        c.years = st.sidebar.number_input(
            "Contribution years", min_value=0.0, value=float(c.years), step=1.0)

    st.sidebar.header("Monte Carlo")
    mc = state.monte_carlo
    mc.enabled = st.sidebar.checkbox("Enable Monte Carlo bands", value=mc.enabled)
    if mc.enabled:
        mc.volatility = st.sidebar.number_input(
            "Volatility (% p.a.)", min_value=0.0, value=float(mc.volatility), step=1.0)
        mc.runs = st.sidebar.slider("Runs", min_value=50, max_value=500, value=int(mc.runs), step=10)
        mc.seed = st.sidebar.number_input("Seed", min_value=0, max_value=4294967295,
                                          value=int(mc.seed), step=1)

    theme = st.sidebar.radio("Chart theme", ["dark", "light"],
                             index=0 if state.theme == "dark" else 1, horizontal=True)
    if theme != state.theme:
        state.set_theme(theme)
        save_ui_config({'theme': theme, 'monte_carlo_runs': mc.runs})


def display_summary_kpis(state: CalculatorState):
    """Headline metrics for the selected scenario"""
    result = state.simulation
    col1, col2, col3, col4 = st.columns(4)

    with col1:
        st.metric("Required Start", format_currency(state.required_start))
        st.caption(f"Total withdrawals: {format_currency(state.total_withdrawals)}")
    with col2:
        st.metric("Required CAGR", state.required_cagr_text)
        st.caption(state.required_cagr_meta)
    with col3:
        st.metric("Accumulation Time", state.auto_time_text)
        if result.auto_status == "overfunded":
            st.caption("starting capital already covers the plan")
    with col4:
        st.metric("Runway", state.runway_text)
        st.caption(f"End balance: {format_currency(result.end_balance)}")

    if state.cagr_status == "warning":
        st.warning("The selected CAGR is below what the starting capital alone would need.")


def display_charts(state: CalculatorState):
    st.plotly_chart(create_balance_path_chart(state.simulation, state.theme),
                    use_container_width=True)
    st.plotly_chart(create_required_capital_matrix(state.targets, state.years_list,
                                                   state.selected.cagr, state.theme),
                    use_container_width=True)


def save_load_section(state: CalculatorState):
    """Download inputs and results, or restore inputs from a JSON file"""
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Downloads")
        st.download_button("Inputs (JSON)", create_state_download_json(state),
                           file_name="withdrawal_planner_state.json", mime="application/json")
        st.download_button("Balance path (CSV)", export_balance_path_csv(state.simulation),
                           file_name="balance_path.csv", mime="text/csv")
        st.download_button("Required capital grid (CSV)", export_required_capital_matrix_csv(state),
                           file_name="required_capital.csv", mime="text/csv")
        report = create_summary_report(state, state.simulation)
        st.download_button("Summary report (JSON)", export_summary_report_json(report),
                           file_name="summary_report.json", mime="application/json")

    with col2:
        st.subheader("Load Inputs")
        uploaded_file = st.file_uploader("Upload state JSON", type=['json'])
        if uploaded_file is not None:
            json_string = uploaded_file.read().decode('utf-8')
            is_valid, error_message = validate_state_json(json_string)
            if is_valid:
                if st.button("Apply uploaded inputs"):
                    st.session_state.calculator = parse_state_upload_json(json_string)
                    st.session_state.calculator.refresh(cached_simulation)
                    st.rerun()
            else:
                st.error(f"Invalid state file: {error_message}")


def main():
    st.set_page_config(page_title="Withdrawal Planner", page_icon="📈", layout="wide")
    configure_logging()
    initialize_session_state()

    state: CalculatorState = st.session_state.calculator
    create_sidebar(state)
    state.refresh(cached_simulation)

    st.title("Retirement Withdrawal Planner")
    tab1, tab2 = st.tabs(["Projection", "Save/Load"])

    with tab1:
        display_summary_kpis(state)
        display_charts(state)

    with tab2:
        save_load_section(state)

    st.markdown("---")
    st.markdown("Built with Streamlit • projections assume constant or log-normal growth, no taxes or fees")


if __name__ == "__main__":
    main()
