"""
IO utilities for saving/loading calculator state and exporting results.
Handles JSON serialization of the editable inputs and CSV exports of results.
"""
import json
import logging
import re
from dataclasses import asdict, fields
from typing import Dict, Any

import pandas as pd

from calculator import CalculatorState
from config_utils import STATE_STORAGE_KEY, THEMES, get_default_state_params
from formatting import format_currency, format_pct, format_years
from ranges import RangeConfig, SelectedScenario
from models import ContributionConfig, MonteCarloConfig, SimulationResult


logger = logging.getLogger(__name__)

STATE_SECTIONS = {
    'ranges': RangeConfig,
    'selected': SelectedScenario,
    'contribution': ContributionConfig,
    'monte_carlo': MonteCarloConfig,
}

# Keys as persisted by the browser version of the planner
_BROWSER_SECTION_KEYS = {'monteCarlo': 'monte_carlo', 'currentTheme': 'theme'}


def _snake_case(key: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def _normalize_keys(state_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Accept both snake_case and the browser's camelCase keys"""
    normalized = {}
    for key, value in state_dict.items():
        key = _BROWSER_SECTION_KEYS.get(key, _snake_case(key))
        if isinstance(value, dict):
            value = {_snake_case(k): v for k, v in value.items()}
        normalized[key] = value
    return normalized


def state_to_dict(state: CalculatorState) -> Dict[str, Any]:
    """
    Convert the editable part of CalculatorState to a dictionary.

    Args:
        state: CalculatorState object

    Returns:
        Dictionary with ranges, selected, contribution, monte_carlo and theme
    """
    param_dict = {name: asdict(getattr(state, name)) for name in STATE_SECTIONS}
    param_dict['theme'] = state.theme
    return param_dict


def dict_to_state(param_dict: Dict[str, Any]) -> CalculatorState:
    """
    Convert dictionary to a sanitized CalculatorState.

    Missing sections or fields take their defaults; unknown keys are ignored.

    Args:
        param_dict: Dictionary with state values

    Returns:
        CalculatorState object
    """
    if STATE_STORAGE_KEY in param_dict and isinstance(param_dict[STATE_STORAGE_KEY], dict):
        param_dict = param_dict[STATE_STORAGE_KEY]
    param_dict = _normalize_keys(param_dict)
    defaults = get_default_state_params()

    sections = {}
    for name, section_cls in STATE_SECTIONS.items():
        values = dict(defaults[name])
        supplied = param_dict.get(name) or {}
        if not isinstance(supplied, dict):
            raise ValueError(f"Section '{name}' must be an object")
        known = {f.name for f in fields(section_cls)}
        ignored = set(supplied) - known
        if ignored:
            logger.debug("Ignoring unknown %s keys: %s", name, sorted(ignored))
        values.update({k: v for k, v in supplied.items() if k in known})
        sections[name] = section_cls(**values)

    theme = param_dict.get('theme', defaults['theme'])
    if theme not in THEMES:
        logger.debug("Unknown theme %r, using %s", theme, defaults['theme'])
        theme = defaults['theme']

    state = CalculatorState(theme=theme, **sections)
    state.sanitize_inputs()
    return state


def save_state_json(state: CalculatorState, filepath: str) -> None:
    """Save calculator state to a JSON file"""
    with open(filepath, 'w') as f:
        json.dump(state_to_dict(state), f, indent=2)


def load_state_json(filepath: str) -> CalculatorState:
    """Load calculator state from a JSON file"""
    with open(filepath, 'r') as f:
        param_dict = json.load(f)
    return dict_to_state(param_dict)


def create_state_download_json(state: CalculatorState) -> str:
    """JSON string of the calculator state for downloading"""
    return json.dumps(state_to_dict(state), indent=2)


def parse_state_upload_json(json_string: str) -> CalculatorState:
    """
    Parse uploaded JSON string to CalculatorState.

    Raises:
        ValueError: if the text is not a JSON object with valid sections
    """
    try:
        param_dict = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(param_dict, dict):
        raise ValueError("State JSON must be an object")
    return dict_to_state(param_dict)


def validate_state_json(json_string: str) -> tuple[bool, str]:
    """
    Validate uploaded state JSON.

    Returns:
        (is_valid, error_message)
    """
    try:
        parse_state_upload_json(json_string)
    except (ValueError, TypeError) as e:
        return False, str(e)
    return True, ""


def export_balance_path_csv(result: SimulationResult) -> str:
    """
    Export the month-by-month balance path to CSV string.

    Columns: month, year, accumulation, withdrawal and, when Monte Carlo
    bands are present, p10, p50, p90.
    """
    df = pd.DataFrame({
        'month': range(len(result.labels)),
        'year': list(result.labels),
        'accumulation': list(result.acc_line),
        'withdrawal': list(result.withdraw_line),
    })
    if result.has_bands:
        df['p10'] = list(result.p10)
        df['p50'] = list(result.p50)
        df['p90'] = list(result.p90)
    return df.to_csv(index=False)


def export_required_capital_matrix_csv(state: CalculatorState) -> str:
    """Export the required-capital grid (rows: years, columns: monthly target)"""
    return state.required_capital_matrix.to_csv()


def create_summary_report(state: CalculatorState,
                          result: SimulationResult) -> Dict[str, Any]:
    """
    Create summary report of a simulation.

    Args:
        state: Calculator state the result was computed from
        result: Simulation result

    Returns:
        Dictionary with inputs, headline metrics and band end values
    """
    cagr_result = state.required_cagr_result
    report = {
        'inputs': state_to_dict(state),
        'headline': {
            'required_start': state.required_start,
            'required_start_text': format_currency(state.required_start),
            'total_withdrawals': state.total_withdrawals,
            'required_cagr': cagr_result.cagr,
            'required_cagr_status': cagr_result.status,
            'required_cagr_text': state.required_cagr_text,
        },
        'projection': {
            'months_accum': result.months_accum,
            'months_total': result.months_total,
            'accumulation_time': format_years(result.months_accum),
            'auto_status': result.auto_status,
            'end_balance': result.end_balance,
            'end_balance_text': format_currency(result.end_balance),
            'ruin_month': result.ruin_month,
            'runway': state.runway_text,
        },
    }
    if result.has_bands:
        report['monte_carlo'] = {
            'runs': state.monte_carlo.runs,
            'seed': state.monte_carlo.seed,
            'volatility': format_pct(state.monte_carlo.volatility),
            'end_p10': result.p10[-1],
            'end_p50': result.p50[-1],
            'end_p90': result.p90[-1],
        }
    return report


def export_summary_report_json(report: Dict[str, Any]) -> str:
    """Export summary report as JSON string"""
    return json.dumps(report, indent=2, default=str)
