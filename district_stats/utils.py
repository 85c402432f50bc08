# utils.py

"""Utility functions for District Stats."""

import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

import requests

from .config import LOG_FORMAT, LOG_DATE_FORMAT

logger = logging.getLogger(__name__)

T = TypeVar("T")

def setup_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level and format."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )

def get_session() -> requests.Session:
    """Create an HTTP session that expects JSON responses."""
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session

def time_step(timings: Dict[str, float], step: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run func and record its wall-clock duration in milliseconds.

    Args:
        timings: Mapping of step name to elapsed milliseconds, updated in place
        step: Name recorded for this step
        func: Callable to run

    Returns:
        Whatever func returns
    """
    start = time.monotonic()
    try:
        return func(*args, **kwargs)
    finally:
        elapsed = (time.monotonic() - start) * 1000.0
        timings[step] = elapsed
        logger.debug(f"{step} took {elapsed:.1f} ms")

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is zero."""
    if not denominator:
        return default
    return numerator / denominator

def min_or_default(values: Iterable[float], default: float = 0.0) -> float:
    return min(values, default=default)

def max_or_default(values: Iterable[float], default: float = 0.0) -> float:
    return max(values, default=default)

def percent(part: float, whole: float) -> float:
    return safe_divide(part, whole) * 100.0

def short_host(host: Optional[str]) -> str:
    if not host:
        return ""
    return host.split('.')[0]
