"""Put-call parity and cross-engine edge cases."""

import math

import numpy as np
import pytest

from option_pricing import OptionPricingError
from option_pricing.exceptions import UnsupportedFeatureError
from option_pricing.payoffs import PutPayoff
from option_pricing.utils import discount_factor, put_call_parity_gap, put_call_parity_rhs
from option_pricing.valuation import (
    BinomialTreeEngine,
    FiniteDifferenceEngine,
    LongstaffSchwartzEngine,
    MonteCarloEngine,
)

from option_pricing.tests.helpers import bs_price, make_option


class TestParityHelpers:
    def test_rhs(self):
        option = make_option(dividend_yield=0.02)
        expected = 100.0 * math.exp(-0.02) - 100.0 * math.exp(-0.05)
        assert put_call_parity_rhs(option) == pytest.approx(expected)

    def test_gap_zero_for_black_scholes(self, euro_call, euro_put):
        gap = put_call_parity_gap(bs_price(euro_call), bs_price(euro_put), euro_call)
        assert gap == pytest.approx(0.0, abs=1e-10)

    def test_discount_factor(self):
        assert discount_factor(0.05, 2.0) == pytest.approx(math.exp(-0.1))
        assert discount_factor(-0.01, 1.0) > 1.0


class TestEngineParity:
    @pytest.mark.parametrize("q", [0.0, 0.03])
    def test_binomial_parity_is_exact(self, q):
        call = make_option(dividend_yield=q)
        put = call.replace(payoff=PutPayoff())
        engine = BinomialTreeEngine(num_steps=250)
        gap = put_call_parity_gap(engine.price(call), engine.price(put), call)
        assert abs(gap) < 1e-8

    def test_monte_carlo_parity_with_common_seed(self, euro_call, euro_put):
        engine = MonteCarloEngine(num_steps=4, num_paths=50_000, random_seed=21)
        gap = put_call_parity_gap(engine.price(euro_call), engine.price(euro_put), euro_call)
        # C - P is the discounted mean of S_T - K on identical paths
        assert abs(gap) < 0.3


class TestEdgeCases:
    @pytest.mark.parametrize(
        "engine",
        [
            BinomialTreeEngine(num_steps=300),
            FiniteDifferenceEngine(time_steps=200, price_steps=200),
        ],
    )
    def test_deep_itm_european_call(self, engine):
        option = make_option(spot=300.0)
        forward_value = 300.0 - 100.0 * math.exp(-0.05)
        assert np.isclose(engine.price(option), forward_value, atol=0.05)

    @pytest.mark.parametrize(
        "engine",
        [
            BinomialTreeEngine(num_steps=300),
            FiniteDifferenceEngine(time_steps=100, price_steps=200),
            MonteCarloEngine(num_steps=4, num_paths=5_000, random_seed=3),
        ],
    )
    def test_deep_otm_european_put(self, engine):
        option = make_option(spot=400.0, payoff=PutPayoff())
        assert engine.price(option) == pytest.approx(0.0, abs=1e-4)

    def test_short_maturity_approaches_intrinsic(self):
        option = make_option(spot=110.0, maturity=1e-4)
        pv = BinomialTreeEngine(num_steps=50).price(option)
        assert np.isclose(pv, 10.0, atol=0.01)

    def test_high_volatility(self):
        option = make_option(volatility=1.5)
        pv = BinomialTreeEngine(num_steps=400).price(option)
        assert np.isclose(pv, bs_price(option), rtol=5e-3)

    def test_negative_rate(self):
        option = make_option(rate=-0.01, payoff=PutPayoff())
        pv = FiniteDifferenceEngine(time_steps=200, price_steps=300).price(option)
        assert np.isclose(pv, bs_price(option), atol=0.05)

    def test_all_errors_share_base_class(self, asian_call):
        with pytest.raises(OptionPricingError):
            BinomialTreeEngine(num_steps=5).price(asian_call)
        with pytest.raises(UnsupportedFeatureError):
            LongstaffSchwartzEngine(num_steps=5, num_paths=10).price(asian_call)
