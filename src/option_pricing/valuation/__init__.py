"""Pricing engines and rule-based engine selection.

Public API
----------
Engines (all implement ``price(option) -> float``):
    BinomialTreeEngine: CRR lattice backward induction
    FiniteDifferenceEngine: Crank-Nicolson PDE solver with policy iteration
    MonteCarloEngine: European GBM simulation, vanilla and Asian payoffs
    LongstaffSchwartzEngine: least-squares Monte Carlo for American vanillas

Parameter classes:
    BinomialParams, PDEParams, MonteCarloParams, LSMParams
    EngineConfig: accuracy tier plus overrides consumed by selection rules

Selection:
    EngineRule, EngineFactory, EngineSelection, create_engine, register_rule
"""

from .base import PricingEngine
from .binomial import BinomialLattice, BinomialTreeEngine
from .monte_carlo import LongstaffSchwartzEngine, MonteCarloEngine
from .params import (
    BinomialParams,
    EngineConfig,
    LSMParams,
    MonteCarloParams,
    PDEParams,
    ValuationParams,
)
from .pde import FiniteDifferenceEngine, PDESolution
from .selection import (
    AMERICAN_VANILLA_RULE,
    DEFAULT_RULES,
    EUROPEAN_VANILLA_RULE,
    FALLBACK_RULE,
    PATH_DEPENDENT_RULE,
    EngineFactory,
    EngineRule,
    EngineSelection,
    configure_default,
    create_engine,
    default_factory,
    register_rule,
)

__all__ = [
    # Engines
    "PricingEngine",
    "BinomialLattice",
    "BinomialTreeEngine",
    "FiniteDifferenceEngine",
    "PDESolution",
    "MonteCarloEngine",
    "LongstaffSchwartzEngine",
    # Parameter classes
    "BinomialParams",
    "PDEParams",
    "MonteCarloParams",
    "LSMParams",
    "EngineConfig",
    "ValuationParams",
    # Selection
    "EngineRule",
    "EngineFactory",
    "EngineSelection",
    "PATH_DEPENDENT_RULE",
    "AMERICAN_VANILLA_RULE",
    "EUROPEAN_VANILLA_RULE",
    "FALLBACK_RULE",
    "DEFAULT_RULES",
    "default_factory",
    "configure_default",
    "register_rule",
    "create_engine",
]
