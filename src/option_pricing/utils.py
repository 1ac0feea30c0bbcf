"""Helper functions shared by the pricing engines."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING
from collections.abc import Iterator
import math
import time

from .exceptions import ValidationError

if TYPE_CHECKING:
    from .option import Option

__all__ = [
    "log_timing",
    "require_positive_int",
    "discount_factor",
    "put_call_parity_rhs",
    "put_call_parity_gap",
]


@contextmanager
def log_timing(logger, label: str, enabled: bool) -> Iterator[None]:
    """Log timing for a code block when enabled is True."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("Timing %s: %.6fs", label, elapsed)


def require_positive_int(value, label: str, minimum: int = 1) -> int:
    """Return *value* as an int, raising ValidationError if it is not an integer >= minimum."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer, got {type(value).__name__}")
    if value < minimum:
        raise ValidationError(f"{label} must be >= {minimum}, got {value}")
    return value


def discount_factor(rate: float, time_to_maturity: float) -> float:
    """Continuously compounded discount factor exp(-r * t)."""
    return math.exp(-rate * time_to_maturity)


def put_call_parity_rhs(option: Option) -> float:
    """Right-hand side of European put-call parity: S e^{-qT} - K e^{-rT}.

    Examples
    ========
    >>> from option_pricing import Option
    >>> opt = Option(spot=100.0, strike=100.0, maturity=1.0, rate=0.0, volatility=0.2)
    >>> put_call_parity_rhs(opt)
    0.0
    """
    return option.spot * discount_factor(
        option.dividend_yield, option.maturity
    ) - option.strike * discount_factor(option.rate, option.maturity)


def put_call_parity_gap(call_value: float, put_value: float, option: Option) -> float:
    """Return (C - P) - (S e^{-qT} - K e^{-rT}); zero when parity holds exactly."""
    return (call_value - put_value) - put_call_parity_rhs(option)
