"""Valuation of European and American options using the binomial option pricing model of
Cox-Ross-Rubinstein
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math

import numpy as np

from ..exceptions import ArbitrageViolationError, ValidationError
from ..option import Option
from ..utils import log_timing
from .base import PricingEngine
from .params import BinomialParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BinomialLattice:
    """Recombining CRR price lattice built for one pricing call.

    Node (i, j) is the state after i steps with j up-moves; its spot is
    S * u^j * d^(i-j).

    Attributes
    ==========
    spot: float
        root spot price
    num_steps: int
        number of time steps N
    dt: float
        step size T / N
    up, down: float
        multiplicative factors u = exp(sigma sqrt(dt)), d = 1 / u
    p: float
        risk-neutral up-move probability (exp((r-q) dt) - d) / (u - d)
    discount: float
        per-step discount factor exp(-r dt)
    """

    spot: float
    num_steps: int
    dt: float
    up: float
    down: float
    p: float
    discount: float

    @classmethod
    def from_option(cls, option: Option, num_steps: int) -> "BinomialLattice":
        """Derive the lattice parameters, rejecting an unstable step size."""
        dt = option.maturity / num_steps
        up = math.exp(option.volatility * math.sqrt(dt))
        down = 1.0 / up
        growth = math.exp((option.rate - option.dividend_yield) * dt)
        p = (growth - down) / (up - down)
        if p < 0.0 or p > 1.0:
            raise ArbitrageViolationError(
                f"Risk-neutral probability p={p:.6g} outside [0, 1]: "
                f"num_steps={num_steps}, volatility={option.volatility}, "
                f"rate={option.rate}, dividend_yield={option.dividend_yield}. "
                "Increase num_steps or check the rate/volatility inputs."
            )
        return cls(
            spot=option.spot,
            num_steps=num_steps,
            dt=dt,
            up=up,
            down=down,
            p=p,
            discount=math.exp(-option.rate * dt),
        )

    def layer(self, i: int) -> np.ndarray:
        """Spot prices of the i + 1 nodes after i steps, ordered by up-move count."""
        if not 0 <= i <= self.num_steps:
            raise ValidationError(f"step {i} outside lattice [0, {self.num_steps}]")
        j = np.arange(i + 1)
        return self.spot * self.up**j * self.down ** (i - j)

    def spot_at(self, i: int, j: int) -> float:
        """Spot price at node (i, j)."""
        if not 0 <= i <= self.num_steps or not 0 <= j <= i:
            raise ValidationError(f"node ({i}, {j}) outside lattice with {self.num_steps} steps")
        return float(self.spot * self.up**j * self.down ** (i - j))


class BinomialTreeEngine(PricingEngine):
    """Backward induction on a CRR lattice with the option's exercise strategy.

    Supports vanilla payoffs under European or American exercise. Path-dependent
    payoffs are rejected: a recombining lattice cannot carry a running average.
    """

    def __init__(self, num_steps: int = 500, *, log_timings: bool = False) -> None:
        self.params = BinomialParams(num_steps=num_steps, log_timings=log_timings)

    @property
    def num_steps(self) -> int:
        return self.params.num_steps

    def _backward_induction(self, option: Option, keep_layers: bool) -> list[np.ndarray]:
        self._check_option(option)
        self._reject_path_dependent(option)

        num_steps = self.num_steps
        lattice = BinomialLattice.from_option(option, num_steps)
        logger.debug(
            "Binomial %s num_steps=%d p=%.6f u=%.6f",
            type(option.exercise).__name__,
            num_steps,
            lattice.p,
            lattice.up,
        )

        payoff = option.payoff
        exercise = option.exercise
        values = np.asarray(payoff.value(option.strike, spot=lattice.layer(num_steps)), dtype=float)
        layers = [values]

        # Child j+1 is the up-move, child j the down-move
        for i in range(num_steps - 1, -1, -1):
            continuation = lattice.discount * (
                lattice.p * values[1:] + (1.0 - lattice.p) * values[:-1]
            )
            intrinsic = payoff.value(option.strike, spot=lattice.layer(i))
            values = np.asarray(exercise.value_at_node(intrinsic, continuation), dtype=float)
            if keep_layers:
                layers.append(values)

        if not keep_layers:
            return [values]
        layers.reverse()
        return layers

    def solve(self, option: Option) -> list[np.ndarray]:
        """Compute node values for every lattice layer.

        Returns
        =======
        list of np.ndarray
            element i holds the i + 1 option values after i steps
        """
        return self._backward_induction(option, keep_layers=True)

    def price(self, option: Option) -> float:
        """Return the root value of the lattice."""
        with log_timing(logger, "Binomial price", self.params.log_timings):
            root = self._backward_induction(option, keep_layers=False)[0]
        return float(root[0])
