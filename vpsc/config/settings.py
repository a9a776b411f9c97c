"""
Solver tolerances with environment variable overrides.

The defaults are the values the active-set solver was tuned with. Changing
them changes which constraints get split or merged, so results are only
reproducible across runs that share the same settings.

Usage:
    from vpsc.config.settings import get_setting

    tolerance = get_setting('lagrangian_tolerance')

Environment Variables:
    VPSC_LAGRANGIAN_TOLERANCE=-1e-4  - Multiplier below which an active constraint is split
    VPSC_ZERO_UPPERBOUND=-1e-10      - Slack below which an inactive constraint is violated
    VPSC_COST_CONVERGENCE=1e-4       - Cost change that ends Solver.solve()
    VPSC_BOUND_WEIGHT_FACTOR=1000    - Weight multiplier for bound variables in overlap removal
"""

import os
from typing import Dict


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(
            f"Environment variable {name} must be a number, got '{value}'"
        ) from None


SOLVER_SETTINGS: Dict[str, float] = {
    'lagrangian_tolerance': _env_float('VPSC_LAGRANGIAN_TOLERANCE', -1e-4),
    'zero_upperbound': _env_float('VPSC_ZERO_UPPERBOUND', -1e-10),
    'cost_convergence': _env_float('VPSC_COST_CONVERGENCE', 1e-4),
    'bound_weight_factor': _env_float('VPSC_BOUND_WEIGHT_FACTOR', 1000.0),
}


def get_setting(name: str) -> float:
    """
    Look up a solver setting.

    Args:
        name: Setting name (e.g., 'lagrangian_tolerance')

    Returns:
        Current value of the setting

    Raises:
        KeyError: If setting name is not recognized

    Example:
        >>> get_setting('zero_upperbound')
        -1e-10
    """
    if name not in SOLVER_SETTINGS:
        available = ', '.join(SOLVER_SETTINGS.keys())
        raise KeyError(
            f"Unknown solver setting: '{name}'. "
            f"Available settings: {available}"
        )

    return SOLVER_SETTINGS[name]


def get_all_settings() -> Dict[str, float]:
    """
    Get all solver settings and their current values.

    Returns:
        Copy of the settings dictionary
    """
    return SOLVER_SETTINGS.copy()
