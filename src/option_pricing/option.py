"""Immutable option contract description."""

from __future__ import annotations

from dataclasses import dataclass, field, replace as dc_replace
import math
import numbers

import numpy as np

from .exceptions import ConfigurationError, UnsupportedFeatureError, ValidationError
from .exercise import EuropeanExercise, Exercise
from .payoffs import CallPayoff, Payoff

__all__ = ["Option"]


def _finite(value, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(
            f"Option.{label} must be a real number, got {type(value).__name__}"
        )
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"Option.{label} must be finite")
    return number


@dataclass(frozen=True, slots=True)
class Option:
    """Contract terms plus the exercise and payoff strategies.

    Attributes
    ==========
    spot: float
        current price of the underlying, > 0
    strike: float
        strike price, > 0
    maturity: float
        time to maturity in years, > 0
    rate: float
        continuously compounded risk-free rate (any sign)
    volatility: float
        annualised volatility, > 0
    dividend_yield: float
        continuous dividend yield, >= 0
    exercise: Exercise
        shared exercise strategy (European / American)
    payoff: Payoff
        shared payoff strategy (Call / Put / AsianCall / AsianPut)
    """

    spot: float
    strike: float
    maturity: float
    rate: float
    volatility: float
    dividend_yield: float = 0.0
    exercise: Exercise = field(default_factory=EuropeanExercise)
    payoff: Payoff = field(default_factory=CallPayoff)

    def __post_init__(self) -> None:
        """Validate numeric ranges and strategy types."""
        for label in ("spot", "strike", "maturity", "volatility"):
            if _finite(getattr(self, label), label) <= 0.0:
                raise ValidationError(f"Option.{label} must be positive")
        _finite(self.rate, "rate")
        if _finite(self.dividend_yield, "dividend_yield") < 0.0:
            raise ValidationError("Option.dividend_yield cannot be negative")

        if not isinstance(self.exercise, Exercise):
            raise ConfigurationError(
                f"exercise must be an Exercise strategy, got {type(self.exercise).__name__}"
            )
        if not isinstance(self.payoff, Payoff):
            raise ConfigurationError(
                f"payoff must be a Payoff strategy, got {type(self.payoff).__name__}"
            )

    def replace(self, **kwargs: object) -> "Option":
        """Create a new Option with modified fields.

        Used for bump-and-revalue calculations (e.g., Greeks) without
        mutating the original object. The new instance is fully re-validated.
        """
        return dc_replace(self, **kwargs)

    def intrinsic(self, spot: np.ndarray | float) -> np.ndarray | float:
        """Immediate-exercise value at *spot* for a vanilla payoff."""
        if self.payoff.path_dependent:
            raise UnsupportedFeatureError(
                f"{type(self.payoff).__name__} has no spot-only intrinsic value."
            )
        return self.payoff.value(self.strike, spot=spot)
