"""Bump-and-revalue sensitivities.

Each Greek reprices the option with one input shifted by
``h = max(|x| * relative_bump, absolute_floor)`` and differences the results:

- central differences by default
- one-sided (upward) differences when the downward bump would leave the
  valid domain (spot, volatility or maturity at or below zero)

Pricing goes through ``engine`` when given; otherwise every bumped option is
routed through an engine factory (the process-wide default unless
``factory`` is supplied) with ``config`` (default: balanced accuracy).
Simulation engines should be given a fixed ``random_seed`` so that the bumped
prices share their random numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable
import logging

from .enums import Accuracy
from .exceptions import ConfigurationError
from .option import Option
from .valuation.base import PricingEngine
from .valuation.params import EngineConfig
from .valuation.selection import EngineFactory, configure_default

logger = logging.getLogger(__name__)

__all__ = ["Greeks", "delta", "gamma", "vega", "theta", "rho", "compute_greeks"]

DEFAULT_RELATIVE_BUMP = 1e-4
SPOT_BUMP_FLOOR = 1e-4
VOL_BUMP_FLOOR = 1e-4
TIME_BUMP_FLOOR = 1e-6
RATE_BUMP_FLOOR = 1e-6

Pricer = Callable[[Option], float]


def _pricer(
    engine: PricingEngine | None,
    factory: EngineFactory | None,
    config: EngineConfig | None,
) -> Pricer:
    if engine is not None:
        if not isinstance(engine, PricingEngine):
            raise ConfigurationError(f"engine must be a PricingEngine, got {type(engine).__name__}")
        return engine.price

    if factory is None:
        factory = configure_default()
    if config is None:
        config = EngineConfig(accuracy=Accuracy.BALANCED)

    def price(option: Option) -> float:
        return factory.create(option, config).engine.price(option)

    return price


def _bump_size(x: float, relative_bump: float, absolute_floor: float) -> float:
    return max(abs(x) * relative_bump, absolute_floor)


def _first_derivative(
    pricer: Pricer,
    option: Option,
    field: str,
    relative_bump: float,
    absolute_floor: float,
    *,
    positive: bool,
) -> float:
    x = getattr(option, field)
    h = _bump_size(x, relative_bump, absolute_floor)
    v_up = pricer(option.replace(**{field: x + h}))
    if positive and x - h <= 0.0:
        v_0 = pricer(option)
        logger.debug("d/d%s one-sided h=%.3g", field, h)
        return (v_up - v_0) / h
    v_dn = pricer(option.replace(**{field: x - h}))
    logger.debug("d/d%s central h=%.3g", field, h)
    return (v_up - v_dn) / (2.0 * h)


def _delta(pricer: Pricer, option: Option, relative_bump: float, absolute_floor: float) -> float:
    return _first_derivative(pricer, option, "spot", relative_bump, absolute_floor, positive=True)


def _gamma(pricer: Pricer, option: Option, relative_bump: float, absolute_floor: float) -> float:
    # (S-h, S, S+h) when S - h > 0, else (S, S+h, S+2h)
    S0 = option.spot
    h = _bump_size(S0, relative_bump, absolute_floor)
    v_0 = pricer(option)
    v_up = pricer(option.replace(spot=S0 + h))
    if S0 - h <= 0.0:
        v_up2 = pricer(option.replace(spot=S0 + 2.0 * h))
        return (v_up2 - 2.0 * v_up + v_0) / (h * h)
    v_dn = pricer(option.replace(spot=S0 - h))
    return (v_up - 2.0 * v_0 + v_dn) / (h * h)


def _vega(pricer: Pricer, option: Option, relative_bump: float, absolute_floor: float) -> float:
    return _first_derivative(
        pricer, option, "volatility", relative_bump, absolute_floor, positive=True
    )


def _theta(pricer: Pricer, option: Option, relative_bump: float, absolute_floor: float) -> float:
    return -_first_derivative(
        pricer, option, "maturity", relative_bump, absolute_floor, positive=True
    )


def _rho(pricer: Pricer, option: Option, relative_bump: float, absolute_floor: float) -> float:
    # rates may be negative, so never one-sided
    return _first_derivative(pricer, option, "rate", relative_bump, absolute_floor, positive=False)


def delta(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
    absolute_floor: float = SPOT_BUMP_FLOOR,
) -> float:
    """dV/dS."""
    return _delta(_pricer(engine, factory, config), option, relative_bump, absolute_floor)


def gamma(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
    absolute_floor: float = SPOT_BUMP_FLOOR,
) -> float:
    """d2V/dS2 by a three-point second difference.

    Lattice and grid engines price in discrete steps, so a bump much smaller
    than the node spacing can make the second difference noisy; pass a
    larger ``relative_bump`` for those.
    """
    return _gamma(_pricer(engine, factory, config), option, relative_bump, absolute_floor)


def vega(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
    absolute_floor: float = VOL_BUMP_FLOOR,
) -> float:
    """dV/dsigma per unit of volatility (not per 1%)."""
    return _vega(_pricer(engine, factory, config), option, relative_bump, absolute_floor)


def theta(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
    absolute_floor: float = TIME_BUMP_FLOOR,
) -> float:
    """dV/dt = -dV/dT, per year of calendar time."""
    return _theta(_pricer(engine, factory, config), option, relative_bump, absolute_floor)


def rho(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
    absolute_floor: float = RATE_BUMP_FLOOR,
) -> float:
    """dV/dr per unit of rate."""
    return _rho(_pricer(engine, factory, config), option, relative_bump, absolute_floor)


@dataclass(frozen=True, slots=True)
class Greeks:
    """Price and first/second-order sensitivities of one option.

    Attributes
    ==========
    price: float
    delta: float
    gamma: float
    vega: float
        per unit of volatility
    theta: float
        per year of calendar time
    rho: float
        per unit of rate
    """

    price: float
    delta: float
    gamma: float
    vega: float
    theta: float
    rho: float


def compute_greeks(
    option: Option,
    *,
    engine: PricingEngine | None = None,
    factory: EngineFactory | None = None,
    config: EngineConfig | None = None,
    relative_bump: float = DEFAULT_RELATIVE_BUMP,
) -> Greeks:
    """Price plus all five Greeks, each with its default bump floor."""
    pricer = _pricer(engine, factory, config)
    return Greeks(
        price=pricer(option),
        delta=_delta(pricer, option, relative_bump, SPOT_BUMP_FLOOR),
        gamma=_gamma(pricer, option, relative_bump, SPOT_BUMP_FLOOR),
        vega=_vega(pricer, option, relative_bump, VOL_BUMP_FLOOR),
        theta=_theta(pricer, option, relative_bump, TIME_BUMP_FLOOR),
        rho=_rho(pricer, option, relative_bump, RATE_BUMP_FLOOR),
    )
