"""Solver configuration."""

from .settings import SOLVER_SETTINGS, get_all_settings, get_setting

__all__ = [
    "SOLVER_SETTINGS",
    "get_all_settings",
    "get_setting",
]
