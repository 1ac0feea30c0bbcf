"""Shared pytest fixtures for option_pricing tests."""

import pytest

from option_pricing.exercise import AmericanExercise
from option_pricing.option import Option
from option_pricing.payoffs import AsianCallPayoff, PutPayoff
from option_pricing.valuation import selection

from option_pricing.tests.helpers import make_option


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> Option:
    return make_option()


@pytest.fixture()
def euro_put() -> Option:
    return make_option(payoff=PutPayoff())


@pytest.fixture()
def american_call() -> Option:
    return make_option(exercise=AmericanExercise())


@pytest.fixture()
def american_put() -> Option:
    return make_option(exercise=AmericanExercise(), payoff=PutPayoff())


@pytest.fixture()
def asian_call() -> Option:
    return make_option(payoff=AsianCallPayoff())


# ---------------------------------------------------------------------------
# Process-wide selection state
# ---------------------------------------------------------------------------


@pytest.fixture()
def fresh_default_factory():
    """Reset the process-wide factory before and after the test."""
    selection._reset_default()
    yield selection.default_factory()
    selection._reset_default()
