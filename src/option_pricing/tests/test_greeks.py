"""Tests for bump-and-revalue Greeks."""

import numpy as np
import pytest

from option_pricing.enums import Accuracy
from option_pricing.exceptions import ConfigurationError
from option_pricing.greeks import Greeks, compute_greeks, delta, gamma, rho, theta, vega
from option_pricing.valuation import (
    DEFAULT_RULES,
    BinomialTreeEngine,
    EngineConfig,
    EngineFactory,
    MonteCarloEngine,
)

from option_pricing.tests.helpers import (
    AnalyticEngine,
    LinearEngine,
    bs_call_greeks,
    make_option,
)


class TestCentralDifferences:
    def setup_method(self):
        self.option = make_option(dividend_yield=0.01)
        self.engine = AnalyticEngine()
        self.expected = bs_call_greeks(self.option)

    def test_delta(self):
        assert np.isclose(delta(self.option, engine=self.engine), self.expected["delta"], atol=1e-6)

    def test_gamma(self):
        value = gamma(self.option, engine=self.engine, relative_bump=1e-3)
        assert np.isclose(value, self.expected["gamma"], rtol=1e-4)

    def test_vega(self):
        assert np.isclose(vega(self.option, engine=self.engine), self.expected["vega"], rtol=1e-5)

    def test_theta(self):
        assert np.isclose(theta(self.option, engine=self.engine), self.expected["theta"], rtol=1e-5)

    def test_rho(self):
        assert np.isclose(rho(self.option, engine=self.engine), self.expected["rho"], rtol=1e-5)

    def test_compute_greeks_bundle(self):
        greeks = compute_greeks(self.option, engine=self.engine)
        assert isinstance(greeks, Greeks)
        assert greeks.price == pytest.approx(self.engine.price(self.option))
        assert greeks.delta == pytest.approx(delta(self.option, engine=self.engine))
        assert greeks.theta == pytest.approx(theta(self.option, engine=self.engine))
        assert np.isclose(greeks.vega, self.expected["vega"], rtol=1e-5)


class TestOneSidedDifferences:
    """A linear pricer makes forward and central differences both exact."""

    def setup_method(self):
        self.engine = LinearEngine()

    def test_linear_sensitivities(self):
        option = make_option()
        assert delta(option, engine=self.engine) == pytest.approx(2.0)
        assert vega(option, engine=self.engine) == pytest.approx(3.0)
        assert theta(option, engine=self.engine) == pytest.approx(4.0)
        assert rho(option, engine=self.engine) == pytest.approx(5.0)
        assert gamma(option, engine=self.engine) == pytest.approx(0.0, abs=1e-4)

    def test_tiny_spot_uses_forward_difference(self):
        # h = 1e-4 exceeds the spot, so the downward bump is skipped
        option = make_option(spot=5e-5)
        assert delta(option, engine=self.engine) == pytest.approx(2.0)
        assert gamma(option, engine=self.engine) == pytest.approx(0.0, abs=1e-3)

    def test_tiny_maturity_uses_forward_difference(self):
        option = make_option(maturity=5e-7)
        assert theta(option, engine=self.engine) == pytest.approx(4.0)

    def test_tiny_volatility_uses_forward_difference(self):
        option = make_option(volatility=5e-5)
        assert vega(option, engine=self.engine) == pytest.approx(3.0)

    def test_negative_rate_stays_central(self):
        option = make_option(rate=-1e-7)
        assert rho(option, engine=self.engine) == pytest.approx(5.0)


class TestFactoryRouting:
    def test_default_factory_delta_close_to_analytic(self, euro_call, fresh_default_factory):
        value = delta(euro_call)
        assert np.isclose(value, bs_call_greeks(euro_call)["delta"], atol=0.01)

    def test_explicit_factory_and_config(self, american_put):
        factory = EngineFactory(DEFAULT_RULES)
        value = delta(
            american_put,
            factory=factory,
            config=EngineConfig(Accuracy.BALANCED, steps=200),
            relative_bump=1e-2,
        )
        assert -1.0 < value < 0.0

    def test_seeded_monte_carlo_delta(self, euro_call):
        engine = MonteCarloEngine(num_steps=2, num_paths=20_000, random_seed=12)
        value = delta(euro_call, engine=engine, relative_bump=1e-2)
        assert np.isclose(value, bs_call_greeks(euro_call)["delta"], atol=0.03)

    def test_american_put_greeks_signs(self, american_put):
        greeks = compute_greeks(
            american_put, engine=BinomialTreeEngine(num_steps=200), relative_bump=1e-2
        )
        assert greeks.delta < 0.0
        assert greeks.vega > 0.0
        assert greeks.rho < 0.0
        assert greeks.theta < 0.0

    def test_engine_type_checked(self, euro_call):
        with pytest.raises(ConfigurationError):
            delta(euro_call, engine="binomial")
