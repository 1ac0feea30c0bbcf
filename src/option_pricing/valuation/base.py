"""Common interface implemented by every pricing engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..exceptions import ConfigurationError, UnsupportedFeatureError
from ..option import Option

if TYPE_CHECKING:
    from .params import ValuationParams


class PricingEngine(ABC):
    """Base class for pricing engines.

    Engines hold only their immutable construction parameters, so one
    instance can be reused across (and concurrently by) any number of
    ``price`` calls. Every lattice, grid or path set is built per call.
    """

    params: ValuationParams

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def price(self, option: Option) -> float:
        """Return the present value of *option*."""

    def __repr__(self) -> str:
        return f"{self.name}({self.params!r})"

    # ------------------------------------------------------------------
    # capability guards shared by the engines
    # ------------------------------------------------------------------

    def _check_option(self, option: Option) -> None:
        if not isinstance(option, Option):
            raise ConfigurationError(f"{self.name} requires an Option, got {type(option).__name__}")

    def _reject_path_dependent(self, option: Option) -> None:
        if option.payoff.path_dependent:
            raise UnsupportedFeatureError(
                f"{self.name} does not support path-dependent payoffs "
                f"({type(option.payoff).__name__} with {type(option.exercise).__name__})."
            )
