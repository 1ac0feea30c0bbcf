"""Closed-form references and stub engines used across the test suite."""

import math

from scipy.stats import norm

from option_pricing.enums import OptionType
from option_pricing.exercise import EuropeanExercise
from option_pricing.option import Option
from option_pricing.payoffs import CallPayoff
from option_pricing.valuation.base import PricingEngine

SPOT = 100.0
STRIKE = 100.0
MATURITY = 1.0
RATE = 0.05
VOL = 0.20


def make_option(**overrides) -> Option:
    """ATM one-year European call with no dividends, fields overridable."""
    terms = dict(
        spot=SPOT,
        strike=STRIKE,
        maturity=MATURITY,
        rate=RATE,
        volatility=VOL,
        dividend_yield=0.0,
        exercise=EuropeanExercise(),
        payoff=CallPayoff(),
    )
    terms.update(overrides)
    return Option(**terms)


def _d1_d2(option: Option) -> tuple[float, float]:
    S, K, T = option.spot, option.strike, option.maturity
    r, q, sigma = option.rate, option.dividend_yield, option.volatility
    d1 = (math.log(S / K) + (r - q + 0.5 * sigma**2) * T) / (sigma * math.sqrt(T))
    return d1, d1 - sigma * math.sqrt(T)


def bs_price(option: Option) -> float:
    """Black-Scholes-Merton value of a European vanilla option."""
    d1, d2 = _d1_d2(option)
    S, K, T = option.spot, option.strike, option.maturity
    df_r = math.exp(-option.rate * T)
    df_q = math.exp(-option.dividend_yield * T)
    if option.payoff.option_type is OptionType.CALL:
        return S * df_q * norm.cdf(d1) - K * df_r * norm.cdf(d2)
    return K * df_r * norm.cdf(-d2) - S * df_q * norm.cdf(-d1)


def bs_call_greeks(option: Option) -> dict[str, float]:
    """Analytical delta, gamma, vega, theta and rho of a European call."""
    d1, d2 = _d1_d2(option)
    S, K, T = option.spot, option.strike, option.maturity
    r, q, sigma = option.rate, option.dividend_yield, option.volatility
    df_r = math.exp(-r * T)
    df_q = math.exp(-q * T)
    pdf_d1 = norm.pdf(d1)
    return {
        "delta": df_q * norm.cdf(d1),
        "gamma": df_q * pdf_d1 / (S * sigma * math.sqrt(T)),
        "vega": S * df_q * pdf_d1 * math.sqrt(T),
        "theta": (
            -S * df_q * pdf_d1 * sigma / (2.0 * math.sqrt(T))
            - r * K * df_r * norm.cdf(d2)
            + q * S * df_q * norm.cdf(d1)
        ),
        "rho": K * T * df_r * norm.cdf(d2),
    }


class AnalyticEngine(PricingEngine):
    """Black-Scholes pricer behind the engine interface."""

    params = None

    def price(self, option: Option) -> float:
        return bs_price(option)


class LinearEngine(PricingEngine):
    """Prices as an exact linear function of the inputs: 2S + 3sigma - 4T + 5r."""

    params = None

    def price(self, option: Option) -> float:
        return (
            2.0 * option.spot
            + 3.0 * option.volatility
            - 4.0 * option.maturity
            + 5.0 * option.rate
        )
