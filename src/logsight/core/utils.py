"""
Utility functions and performance helpers for LogSight.

This module provides:
- Performance timing decorator and context manager
- Safe arithmetic for rate calculations
- Formatting helpers shared by the aggregator and presentation layers
"""

import logging
import math
import time
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

# Type variable for generic decorators
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
        logger.info(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("parsing log"):
            parse_log(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None
        self.elapsed: float = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {self.elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {self.elapsed:.3f}s")
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


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round with ties going up, the way the dashboard rounds.

    Python's round() uses banker's rounding (2.5 -> 2); the published numbers
    use half-up (2.5 -> 3).
    """
    factor = 10**decimals
    return math.floor(value * factor + 0.5) / factor


def percentage(part: float, whole: float) -> int:
    """Whole-number percentage of part/whole, 0 when whole is 0."""
    if whole == 0:
        return 0
    return int(round_half_up(part / whole * 100))


def format_clock(total_seconds: float) -> str:
    """
    Format a duration as ``M:SS``.

    Minutes are not wrapped into hours: 95 minutes is "95:00".
    """
    seconds = int(max(0, total_seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def format_relative_time(delta_seconds: float) -> str:
    """
    Format an offset from round start.

    Negative offsets (freeze-time chat) keep a leading minus:
    -75 -> "-1:15", 42 -> "0:42".
    """
    whole = math.floor(delta_seconds)
    if whole < 0:
        return f"-{format_clock(abs(delta_seconds))}"
    return format_clock(whole)


def parse_log_timestamp(date_str: str, time_str: str) -> datetime:
    """Parse the ``MM/DD/YYYY`` + ``HH:MM:SS`` pair at the start of a log line."""
    return datetime.strptime(f"{date_str} {time_str}", "%m/%d/%Y %H:%M:%S")


def to_day_first_date(date_str: str) -> str:
    """
    Reformat ``MM/DD/YYYY`` as ``DD/MM/YYYY``.

    Anything that is not a three-part date is returned unchanged.
    """
    parts = date_str.split("/")
    if len(parts) != 3:
        return date_str
    month, day, year = parts
    return f"{day}/{month}/{year}"
