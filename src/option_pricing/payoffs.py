"""Payoff strategies for vanilla and arithmetic-average Asian options.

Payoffs are stateless and take the strike alongside the price observation,
so a single payoff instance can be shared by options with different strikes.

Notes
-----
- Call: max(S - K, 0), Put: max(K - S, 0), evaluated on the current spot
- Asian call: max(A - K, 0), Asian put: max(K - A, 0), where A is the
  arithmetic average of the realised path prices
- All payoffs are vectorized over numpy arrays
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from .enums import OptionType
from .exceptions import MissingObservationError

__all__ = [
    "Payoff",
    "CallPayoff",
    "PutPayoff",
    "AsianCallPayoff",
    "AsianPutPayoff",
]


def _observation(value: np.ndarray | float | None, label: str, owner: str) -> np.ndarray:
    if value is None:
        raise MissingObservationError(f"{owner} requires {label} to be supplied.")
    arr = np.asarray(value, dtype=float)
    if np.any(arr < 0.0):
        raise MissingObservationError(f"{owner}: {label} cannot be negative.")
    return arr


def _intrinsic(option_type: OptionType, strike: float, level: np.ndarray) -> np.ndarray:
    if option_type is OptionType.CALL:
        return np.maximum(level - strike, 0.0)
    return np.maximum(strike - level, 0.0)


def _as_output(values: np.ndarray) -> np.ndarray | float:
    # 0-d inputs come back as plain floats
    return float(values) if values.ndim == 0 else values


class Payoff(ABC):
    """Base class for payoff strategies.

    Attributes
    ==========
    option_type: OptionType
        CALL or PUT direction of the payoff.
    path_dependent: bool
        Capability marker: True when the payoff needs the path average
        rather than the current spot.
    """

    option_type: ClassVar[OptionType]
    path_dependent: ClassVar[bool]

    @property
    def is_vanilla(self) -> bool:
        return not self.path_dependent

    @abstractmethod
    def value(
        self,
        strike: float,
        *,
        spot: np.ndarray | float | None = None,
        average: np.ndarray | float | None = None,
    ) -> np.ndarray | float:
        """Cash payoff for the given observation(s)."""


class _VanillaPayoff(Payoff):
    path_dependent: ClassVar[bool] = False

    def value(self, strike, *, spot=None, average=None):
        level = _observation(spot, "spot", type(self).__name__)
        return _as_output(_intrinsic(self.option_type, strike, level))


class _AsianPayoff(Payoff):
    path_dependent: ClassVar[bool] = True

    def value(self, strike, *, spot=None, average=None):
        level = _observation(average, "average", type(self).__name__)
        return _as_output(_intrinsic(self.option_type, strike, level))


@dataclass(frozen=True, slots=True)
class CallPayoff(_VanillaPayoff):
    option_type: ClassVar[OptionType] = OptionType.CALL


@dataclass(frozen=True, slots=True)
class PutPayoff(_VanillaPayoff):
    option_type: ClassVar[OptionType] = OptionType.PUT


@dataclass(frozen=True, slots=True)
class AsianCallPayoff(_AsianPayoff):
    option_type: ClassVar[OptionType] = OptionType.CALL


@dataclass(frozen=True, slots=True)
class AsianPutPayoff(_AsianPayoff):
    option_type: ClassVar[OptionType] = OptionType.PUT
