"""
Configuration Utilities for the Withdrawal Planner
Default calculator state, UI preference file and logging setup.
"""

import json
import logging
import os
from typing import Dict, Any, Optional


logger = logging.getLogger(__name__)

STATE_STORAGE_KEY = "roi-calculator-state"
UI_CONFIG_PATH = "ui_config.json"
THEMES = ("light", "dark")

ENV_THEME = "WITHDRAWAL_PLANNER_THEME"
ENV_LOG_LEVEL = "WITHDRAWAL_PLANNER_LOG_LEVEL"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging; level from argument, environment, or INFO"""
    level_name = (level or os.environ.get(ENV_LOG_LEVEL) or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_ui_config(path: str = UI_CONFIG_PATH) -> Dict[str, Any]:
    """Load UI preferences (theme, default runs) from a JSON file"""
    config: Dict[str, Any] = {}
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                config = json.load(f)
            logger.debug("Loaded UI config with %d keys from %s", len(config), path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not load %s: %s", path, e)
            config = {}

    env_theme = os.environ.get(ENV_THEME)
    if env_theme in THEMES:
        config['theme'] = env_theme
    return config


def save_ui_config(config: Dict[str, Any], path: str = UI_CONFIG_PATH) -> None:
    """Save UI preferences to a JSON file"""
    try:
        with open(path, 'w') as f:
            json.dump(config, f, indent=2)
        logger.debug("Saved UI config with %d keys to %s", len(config), path)
    except OSError as e:
        logger.warning("Could not save %s: %s", path, e)


def get_default_state_params() -> Dict[str, Any]:
    """Get default calculator state (the values a fresh session starts from)"""
    return {
        'ranges': {
            'target_min': 1000,
            'target_max': 3000,
            'target_step': 500,
            'years_min': 10,
            'years_max': 20,
            'years_step': 5,
            'cagr_min': 5,
            'cagr_max': 20,
            'cagr_step': 5,
        },
        'selected': {
            'target': 2000,
            'years': 15,
            'cagr': 10,
        },
        'contribution': {
            'start_capital': 0,
            'amount': 500,
            'frequency': 'monthly',
            'mode': 'stop',
            'years': 5,
        },
        'monte_carlo': {
            'enabled': False,
            'volatility': 12,
            'runs': 200,
            'seed': 42,
        },
        'theme': 'dark',
    }
