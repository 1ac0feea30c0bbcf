"""Custom exception hierarchy for the option_pricing library.

All library-specific exceptions inherit from :class:`OptionPricingError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        engine = create_engine(option).engine
        pv = engine.price(option)
    except OptionPricingError as exc:
        log.error("Pricing error: %s", exc)
"""

from __future__ import annotations


class OptionPricingError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(OptionPricingError):
    """Invalid input values (out-of-range, non-finite, non-positive counts, etc.)."""


class MissingObservationError(ValidationError):
    """A payoff or exercise evaluation was called without a required observation."""


class ConfigurationError(OptionPricingError):
    """Wrong types passed to a public API (e.g. raw string instead of a strategy object)."""


# ── Feature support ─────────────────────────────────────────────────


class UnsupportedFeatureError(OptionPricingError):
    """Engine invoked with a payoff/exercise combination it cannot price."""


class EngineSelectionError(OptionPricingError):
    """No registered selection rule matched the option."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(OptionPricingError):
    """Base for errors arising from numerical computation."""


class ArbitrageViolationError(NumericalError):
    """Model parameters imply an arbitrage (e.g. risk-neutral probability outside [0, 1])."""
