"""Rule-based engine selection.

A rule pairs a match predicate over an :class:`Option` with a build function
that turns an :class:`EngineConfig` into a concrete engine. The factory
evaluates every registered rule on each call and keeps the highest-priority
match; ties go to the rule registered first.

Default catalog (highest priority first):

=====================  ========  =====================================
rule                   priority  engine by accuracy tier
=====================  ========  =====================================
path-dependent         100       Monte Carlo, sized by tier
american-vanilla       90        LSM / binomial / finite difference
european-vanilla       80        Monte Carlo / binomial / finite diff.
fallback               0         binomial tree (400 steps)
=====================  ========  =====================================
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable
from typing import NamedTuple
import logging
import threading

from ..enums import Accuracy
from ..exceptions import ConfigurationError, EngineSelectionError
from ..exercise import AmericanExercise, EuropeanExercise
from ..option import Option
from .base import PricingEngine
from .binomial import BinomialTreeEngine
from .monte_carlo import LongstaffSchwartzEngine, MonteCarloEngine
from .params import EngineConfig
from .pde import FiniteDifferenceEngine

logger = logging.getLogger(__name__)

__all__ = [
    "EngineRule",
    "EngineSelection",
    "EngineFactory",
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

# (steps, paths) per tier for path-dependent Monte Carlo
_PATH_DEPENDENT_MC = {
    Accuracy.FAST: (64, 20_000),
    Accuracy.BALANCED: (128, 50_000),
    Accuracy.ACCURATE: (256, 100_000),
}
_FAST_EUROPEAN_MC = (64, 10_000)
_FAST_AMERICAN_LSM = (96, 20_000, 2)
_BALANCED_BINOMIAL_STEPS = 600
_ACCURATE_FD_STEPS = 1000
_FALLBACK_BINOMIAL_STEPS = 400


@dataclass(frozen=True, slots=True)
class EngineRule:
    """Selection rule.

    Attributes
    ==========
    name: str
        identifier reported with the selection
    priority: int
        higher wins among matching rules
    matches: Callable[[Option], bool]
        predicate over the option's exercise/payoff capabilities
    build: Callable[[Option, EngineConfig], PricingEngine]
        constructs the engine with resolution resolved from the config
    """

    name: str
    priority: int
    matches: Callable[[Option], bool]
    build: Callable[[Option, EngineConfig], PricingEngine]

    def __post_init__(self):
        if not isinstance(self.priority, int) or isinstance(self.priority, bool):
            raise ConfigurationError(f"priority must be an int, got {type(self.priority).__name__}")
        if not callable(self.matches) or not callable(self.build):
            raise ConfigurationError("EngineRule.matches and EngineRule.build must be callable")


class EngineSelection(NamedTuple):
    """Outcome of a factory lookup."""

    engine: PricingEngine
    engine_name: str
    rule_name: str


# ── Rule catalog ────────────────────────────────────────────────────


def _is_path_dependent(option: Option) -> bool:
    return option.payoff.path_dependent


def _is_american_vanilla(option: Option) -> bool:
    return isinstance(option.exercise, AmericanExercise) and option.payoff.is_vanilla


def _is_european_vanilla(option: Option) -> bool:
    return isinstance(option.exercise, EuropeanExercise) and option.payoff.is_vanilla


def _always(option: Option) -> bool:
    return True


def _finite_difference(config: EngineConfig) -> FiniteDifferenceEngine:
    return FiniteDifferenceEngine(
        time_steps=config.steps or _ACCURATE_FD_STEPS,
        price_steps=config.price_steps or _ACCURATE_FD_STEPS,
    )


def _build_path_dependent(option: Option, config: EngineConfig) -> PricingEngine:
    steps, paths = _PATH_DEPENDENT_MC[config.accuracy]
    return MonteCarloEngine(
        num_steps=config.steps or steps,
        num_paths=config.paths or paths,
        random_seed=config.random_seed,
    )


def _build_american_vanilla(option: Option, config: EngineConfig) -> PricingEngine:
    if config.accuracy is Accuracy.FAST:
        steps, paths, degree = _FAST_AMERICAN_LSM
        return LongstaffSchwartzEngine(
            num_steps=config.steps or steps,
            num_paths=config.paths or paths,
            basis_degree=config.basis_degree or degree,
            random_seed=config.random_seed,
        )
    if config.accuracy is Accuracy.BALANCED:
        return BinomialTreeEngine(num_steps=config.steps or _BALANCED_BINOMIAL_STEPS)
    return _finite_difference(config)


def _build_european_vanilla(option: Option, config: EngineConfig) -> PricingEngine:
    if config.accuracy is Accuracy.FAST:
        steps, paths = _FAST_EUROPEAN_MC
        return MonteCarloEngine(
            num_steps=config.steps or steps,
            num_paths=config.paths or paths,
            random_seed=config.random_seed,
        )
    if config.accuracy is Accuracy.BALANCED:
        return BinomialTreeEngine(num_steps=config.steps or _BALANCED_BINOMIAL_STEPS)
    return _finite_difference(config)


def _build_fallback(option: Option, config: EngineConfig) -> PricingEngine:
    return BinomialTreeEngine(num_steps=config.steps or _FALLBACK_BINOMIAL_STEPS)


PATH_DEPENDENT_RULE = EngineRule("path-dependent", 100, _is_path_dependent, _build_path_dependent)
AMERICAN_VANILLA_RULE = EngineRule(
    "american-vanilla", 90, _is_american_vanilla, _build_american_vanilla
)
EUROPEAN_VANILLA_RULE = EngineRule(
    "european-vanilla", 80, _is_european_vanilla, _build_european_vanilla
)
FALLBACK_RULE = EngineRule("fallback", 0, _always, _build_fallback)

DEFAULT_RULES: tuple[EngineRule, ...] = (
    PATH_DEPENDENT_RULE,
    AMERICAN_VANILLA_RULE,
    EUROPEAN_VANILLA_RULE,
    FALLBACK_RULE,
)


# ── Factory ─────────────────────────────────────────────────────────


class EngineFactory:
    """Registry of selection rules.

    Registration is guarded by a lock; selection reads a snapshot of the
    rule list, so ``create`` may run concurrently with a late ``register``.
    """

    def __init__(self, rules=()) -> None:
        self._lock = threading.Lock()
        self._rules: tuple[EngineRule, ...] = ()
        for rule in rules:
            self.register(rule)

    @property
    def rules(self) -> tuple[EngineRule, ...]:
        return self._rules

    def register(self, rule: EngineRule) -> "EngineFactory":
        if not isinstance(rule, EngineRule):
            raise ConfigurationError(f"Expected an EngineRule, got {type(rule).__name__}")
        with self._lock:
            self._rules = self._rules + (rule,)
        logger.debug("Registered rule %s priority=%d", rule.name, rule.priority)
        return self

    def create(self, option: Option, config: EngineConfig | None = None) -> EngineSelection:
        """Build the engine of the highest-priority rule matching *option*."""
        if not isinstance(option, Option):
            raise ConfigurationError(f"create requires an Option, got {type(option).__name__}")
        if config is None:
            config = EngineConfig()
        elif not isinstance(config, EngineConfig):
            raise ConfigurationError(
                f"config must be an EngineConfig, got {type(config).__name__}"
            )

        best: EngineRule | None = None
        # Strict comparison keeps the earliest registration on ties
        for rule in self._rules:
            if rule.matches(option) and (best is None or rule.priority > best.priority):
                best = rule
        if best is None:
            raise EngineSelectionError(
                f"No selection rule matches {type(option.exercise).__name__} "
                f"with {type(option.payoff).__name__}."
            )

        engine = best.build(option, config)
        logger.debug(
            "Selected %s via rule %s (accuracy=%s)",
            engine.name,
            best.name,
            config.accuracy.value,
        )
        return EngineSelection(engine=engine, engine_name=engine.name, rule_name=best.name)


# ── Process-wide default ────────────────────────────────────────────

_default_lock = threading.Lock()
_default = EngineFactory()
_default_configured = False


def _register_defaults(factory: EngineFactory) -> None:
    for rule in DEFAULT_RULES:
        factory.register(rule)


def default_factory() -> EngineFactory:
    """Return the process-wide factory (not necessarily configured yet)."""
    return _default


def configure_default(
    configure: Callable[[EngineFactory], None] | None = None,
) -> EngineFactory:
    """Populate the process-wide factory once; later calls are no-ops.

    ``configure`` receives the factory and registers rules on it; the
    built-in catalog is used when it is None.
    """
    global _default_configured
    with _default_lock:
        if not _default_configured:
            (configure or _register_defaults)(_default)
            _default_configured = True
    return _default


def register_rule(rule: EngineRule) -> EngineFactory:
    """Add *rule* to the process-wide factory."""
    return _default.register(rule)


def create_engine(option: Option, config: EngineConfig | None = None) -> EngineSelection:
    """Select an engine from the process-wide factory, configuring it on first use."""
    return configure_default().create(option, config)


def _reset_default() -> None:
    """Drop the process-wide factory and its configured flag (test isolation)."""
    global _default, _default_configured
    with _default_lock:
        _default = EngineFactory()
        _default_configured = False
