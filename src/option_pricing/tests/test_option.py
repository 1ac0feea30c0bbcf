"""Tests for the Option contract and its validation."""

import math

import numpy as np
import pytest

from option_pricing.exceptions import (
    ConfigurationError,
    UnsupportedFeatureError,
    ValidationError,
)
from option_pricing.exercise import AmericanExercise, EuropeanExercise
from option_pricing.option import Option
from option_pricing.payoffs import AsianCallPayoff, CallPayoff, PutPayoff

from option_pricing.tests.helpers import make_option


class TestOptionConstruction:
    def test_accessors_round_trip(self):
        exercise, payoff = AmericanExercise(), PutPayoff()
        opt = Option(
            spot=101.5,
            strike=97.0,
            maturity=0.75,
            rate=-0.002,
            volatility=0.35,
            dividend_yield=0.015,
            exercise=exercise,
            payoff=payoff,
        )
        assert (opt.spot, opt.strike, opt.maturity) == (101.5, 97.0, 0.75)
        assert (opt.rate, opt.volatility, opt.dividend_yield) == (-0.002, 0.35, 0.015)
        assert opt.exercise is exercise
        assert opt.payoff is payoff

    def test_defaults_are_european_call(self):
        opt = Option(spot=100.0, strike=95.0, maturity=0.5, rate=0.01, volatility=0.3)
        assert opt.dividend_yield == 0.0
        assert isinstance(opt.exercise, EuropeanExercise)
        assert isinstance(opt.payoff, CallPayoff)

    @pytest.mark.parametrize("field", ["spot", "strike", "maturity", "volatility"])
    def test_non_positive_inputs_rejected(self, field):
        with pytest.raises(ValidationError, match=field):
            make_option(**{field: 0.0})
        with pytest.raises(ValidationError, match=field):
            make_option(**{field: -1.0})

    def test_negative_rate_allowed(self):
        opt = make_option(rate=-0.01)
        assert opt.rate == -0.01

    def test_negative_dividend_yield_rejected(self):
        with pytest.raises(ValidationError, match="dividend_yield"):
            make_option(dividend_yield=-0.02)

    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_non_finite_rate_rejected(self, value):
        with pytest.raises(ValidationError, match="finite"):
            make_option(rate=value)

    def test_non_numeric_spot_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            make_option(spot="100")
        with pytest.raises(ConfigurationError):
            make_option(spot=True)

    def test_strategy_types_checked(self):
        with pytest.raises(ConfigurationError, match="Exercise"):
            make_option(exercise="american")
        with pytest.raises(ConfigurationError, match="Payoff"):
            make_option(payoff="call")

    def test_option_is_immutable(self, euro_call):
        with pytest.raises(AttributeError):
            euro_call.spot = 101.0


class TestOptionReplace:
    def test_replace_returns_new_instance(self, euro_call):
        bumped = euro_call.replace(spot=101.0)
        assert bumped.spot == 101.0
        assert euro_call.spot == 100.0
        assert bumped.payoff is euro_call.payoff

    def test_replace_revalidates(self, euro_call):
        with pytest.raises(ValidationError):
            euro_call.replace(volatility=-0.1)


class TestOptionIntrinsic:
    def test_call_and_put_intrinsic(self):
        call = make_option(strike=90.0)
        put = make_option(strike=110.0, payoff=PutPayoff(), exercise=AmericanExercise())
        assert call.intrinsic(100.0) == pytest.approx(10.0)
        assert put.intrinsic(100.0) == pytest.approx(10.0)

    def test_intrinsic_vectorised(self, euro_call):
        values = euro_call.intrinsic(np.array([80.0, 100.0, 130.0]))
        assert np.allclose(values, [0.0, 0.0, 30.0])

    def test_path_dependent_has_no_intrinsic(self):
        with pytest.raises(UnsupportedFeatureError):
            make_option(payoff=AsianCallPayoff()).intrinsic(100.0)
