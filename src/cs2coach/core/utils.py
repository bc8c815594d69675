"""
Utility functions and performance helpers for cs2coach.

This module provides:
- Performance timing helpers
- Safe arithmetic used by the rating engine
- Weapon name normalization
"""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from cs2coach.core.constants import WEAPON_COSTS, WEAPON_NAME_ALIASES, Team

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time.

    Usage:
        @timed
        def my_function():
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("parsing event stream"):
            parse(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is 0.

    Args:
        numerator: Top of fraction
        denominator: Bottom of fraction
        default: Value to return if denominator is 0

    Returns:
        Result of division or default
    """
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value to a range."""
    return max(min_val, min(value, max_val))


def scale_value(value: float, min_val: float, max_val: float) -> float:
    """
    Map a value onto [0, 1] over the range [min_val, max_val].

    Values below the range give 0, values above give 1.
    """
    return clamp((value - min_val) / (max_val - min_val), 0.0, 1.0)


def normalize_weapon_name(name: str) -> str:
    """Lower-case a weapon/item name and strip the engine's ``weapon_`` prefix."""
    if not name:
        return ""
    weapon = name.strip().lower().replace(" ", "_")
    if weapon.startswith("weapon_"):
        weapon = weapon[len("weapon_") :]
    return WEAPON_NAME_ALIASES.get(weapon, weapon)


def estimate_item_cost(item_name: str) -> int:
    """
    Look up the purchase cost of a weapon or equipment item.

    Unrecognized names are worth nothing rather than raising.

    Args:
        item_name: Item name as decoded (e.g. 'weapon_ak47', 'vesthelm').

    Returns:
        Cost in dollars, 0 when unknown.
    """
    return WEAPON_COSTS.get(normalize_weapon_name(item_name), 0)


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a 0-1 fraction as a percentage string."""
    return f"{value * 100:.{decimals}f}%"


def side_name(team: int) -> str:
    """Map a team number to its side label ("T", "CT" or "Unknown")."""
    if team == Team.TERRORIST:
        return "T"
    if team == Team.CT:
        return "CT"
    return "Unknown"
