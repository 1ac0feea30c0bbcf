"""Monte Carlo simulation option valuation implementations."""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy import linalg

from ..exceptions import UnsupportedFeatureError
from ..exercise import AmericanExercise, EuropeanExercise
from ..option import Option
from ..stochastic_processes import BoxMullerNormals, GBMPathGenerator, NormalSourceFactory
from ..utils import log_timing
from .base import PricingEngine
from .params import LSMParams, MonteCarloParams

logger = logging.getLogger(__name__)


def _standard_error(pv_pathwise: np.ndarray) -> float:
    n_paths = pv_pathwise.size
    if n_paths < 2:
        return 0.0
    return float(np.std(pv_pathwise, ddof=1) / np.sqrt(n_paths))


def _warn_if_high_std_error(
    *,
    std_error: float,
    pv_mean: float,
    n_paths: int,
    warn_ratio: float | None,
    label: str,
) -> None:
    """Emit a warning log if MC standard error is high relative to the PV estimate."""
    if warn_ratio is None or n_paths < 2:
        return
    scale = max(abs(pv_mean), 1.0e-12)
    ratio = std_error / scale
    logger.debug(
        "MC %s std_error=%.6g ratio=%.6g paths=%d",
        label,
        std_error,
        ratio,
        n_paths,
    )
    if ratio > warn_ratio:
        logger.warning(
            "MC %s standard error high: std_error=%.6g ratio=%.6g (>%.3g) paths=%d",
            label,
            std_error,
            ratio,
            warn_ratio,
            n_paths,
        )


def _power_basis(x: np.ndarray, deg: int) -> np.ndarray:
    """Design matrix [1, x, x^2, ..., x^deg] of shape ``(n, deg+1)``."""
    return np.vander(np.asarray(x, dtype=float), deg + 1, increasing=True)


def _lsm_continuation(
    S_t: np.ndarray,
    Y: np.ndarray,
    strike: float,
    deg: int,
) -> np.ndarray:
    """Least-squares estimate of continuation values for in-the-money paths.

    Regresses discounted future cash flows ``Y`` on powers of moneyness
    ``S/K``. The fit uses a pivoted QR (LAPACK ``gelsy``) so that a
    rank-deficient design, e.g. every path sitting at the initial spot,
    still yields the least-squares projection (the cross-sectional mean).

    Parameters
    ==========
    S_t: np.ndarray
        spot prices of the in-the-money paths at this step
    Y: np.ndarray
        discounted cash flows of the same paths
    strike: float
        option strike, normalises the regressor
    deg: int
        polynomial degree of the basis

    Returns
    =======
    np.ndarray
        fitted continuation value per path
    """
    X = _power_basis(S_t / strike, deg)
    beta, *_ = linalg.lstsq(X, Y, lapack_driver="gelsy")
    return X @ beta


class MonteCarloEngine(PricingEngine):
    """European pricing by simulating GBM paths under the risk-neutral measure.

    Handles vanilla and arithmetic-average Asian payoffs. The average covers
    all ``num_steps + 1`` observations of a path, the initial spot included.
    Paths are generated ``batch_size`` at a time and dropped once their
    payoffs are taken. Results are reproducible for a fixed ``random_seed``
    and ``batch_size``.
    """

    def __init__(
        self,
        num_steps: int = 500,
        num_paths: int = 10_000,
        random_seed: int | None = None,
        *,
        batch_size: int = 10_000,
        std_error_warn_ratio: float | None = 0.05,
        normal_source: NormalSourceFactory = BoxMullerNormals,
        log_timings: bool = False,
    ) -> None:
        self.params = MonteCarloParams(
            num_steps=num_steps,
            num_paths=num_paths,
            random_seed=random_seed,
            batch_size=batch_size,
            std_error_warn_ratio=std_error_warn_ratio,
            log_timings=log_timings,
        )
        self.normal_source = normal_source

    @property
    def num_steps(self) -> int:
        return self.params.num_steps

    @property
    def num_paths(self) -> int:
        return self.params.num_paths

    def _validate(self, option: Option) -> None:
        self._check_option(option)
        if not isinstance(option.exercise, EuropeanExercise):
            raise UnsupportedFeatureError(
                f"{self.name} supports only European exercise, "
                f"got {type(option.exercise).__name__}."
            )

    def simulate_payoffs(self, option: Option) -> np.ndarray:
        """Undiscounted payoff of every simulated path, shape (num_paths,)."""
        self._validate(option)
        params = self.params
        generator = GBMPathGenerator.from_option(
            option, params.num_steps, self.normal_source(params.random_seed)
        )

        payoffs = np.empty(params.num_paths, dtype=float)
        n_batches = 0
        for start in range(0, params.num_paths, params.batch_size):
            stop = min(start + params.batch_size, params.num_paths)
            paths = generator.generate_paths(stop - start)
            payoffs[start:stop] = option.payoff.value(
                option.strike,
                spot=paths[:, -1],
                average=paths.mean(axis=1),
            )
            n_batches += 1

        logger.debug(
            "MC %s paths=%d steps=%d batches=%d",
            type(option.payoff).__name__,
            params.num_paths,
            params.num_steps,
            n_batches,
        )
        return payoffs

    def price_with_error(self, option: Option) -> tuple[float, float]:
        """Return (present value, standard error of the estimate)."""
        with log_timing(logger, "MC European price", self.params.log_timings):
            pv_pathwise = math.exp(-option.rate * option.maturity) * self.simulate_payoffs(option)
            pv = float(np.mean(pv_pathwise))
        std_error = _standard_error(pv_pathwise)
        _warn_if_high_std_error(
            std_error=std_error,
            pv_mean=pv,
            n_paths=pv_pathwise.size,
            warn_ratio=self.params.std_error_warn_ratio,
            label="European",
        )
        return pv, std_error

    def price(self, option: Option) -> float:
        return self.price_with_error(option)[0]


class LongstaffSchwartzEngine(PricingEngine):
    """American pricing by least-squares Monte Carlo (Longstaff & Schwartz, 2001).

    Walks back from maturity over all simulated paths, regressing the
    discounted cash flows of in-the-money paths on a polynomial basis to
    estimate the continuation value. A path exercises when its intrinsic
    value is positive and at least the fitted continuation. Steps with at
    most ``basis_degree + 1`` in-the-money paths skip the regression and
    every path continues.

    Only vanilla payoffs under American exercise are supported.
    """

    def __init__(
        self,
        num_steps: int = 100,
        num_paths: int = 10_000,
        basis_degree: int = 2,
        random_seed: int | None = None,
        *,
        std_error_warn_ratio: float | None = 0.05,
        normal_source: NormalSourceFactory = BoxMullerNormals,
        log_timings: bool = False,
    ) -> None:
        self.params = LSMParams(
            num_steps=num_steps,
            num_paths=num_paths,
            basis_degree=basis_degree,
            random_seed=random_seed,
            std_error_warn_ratio=std_error_warn_ratio,
            log_timings=log_timings,
        )
        self.normal_source = normal_source

    @property
    def num_steps(self) -> int:
        return self.params.num_steps

    @property
    def num_paths(self) -> int:
        return self.params.num_paths

    @property
    def basis_degree(self) -> int:
        return self.params.basis_degree

    def _validate(self, option: Option) -> None:
        self._check_option(option)
        if not isinstance(option.exercise, AmericanExercise):
            raise UnsupportedFeatureError(
                f"{self.name} requires American exercise, got {type(option.exercise).__name__}."
            )
        self._reject_path_dependent(option)

    def present_value_pathwise(self, option: Option) -> np.ndarray:
        """Return each path's cash flow discounted to t = 0 under the fitted policy."""
        self._validate(option)
        params = self.params
        generator = GBMPathGenerator.from_option(
            option, params.num_steps, self.normal_source(params.random_seed)
        )
        spot_paths = generator.generate_paths(params.num_paths)
        disc = math.exp(-option.rate * generator.dt)
        strike = option.strike
        min_itm = params.basis_degree + 2

        cash_flows = np.asarray(option.intrinsic(spot_paths[:, -1]), dtype=float)
        regressions = 0
        exercised = 0

        for t in range(params.num_steps - 1, -1, -1):
            cash_flows *= disc
            S_t = spot_paths[:, t]
            intrinsic = np.asarray(option.intrinsic(S_t), dtype=float)
            itm = intrinsic > 0.0
            if np.count_nonzero(itm) < min_itm:
                continue

            continuation = _lsm_continuation(S_t[itm], cash_flows[itm], strike, params.basis_degree)
            exercise_now = intrinsic[itm] >= continuation
            itm_idx = np.flatnonzero(itm)[exercise_now]
            cash_flows[itm_idx] = intrinsic[itm_idx]
            regressions += 1
            exercised += itm_idx.size

        logger.debug(
            "MC American paths=%d time_steps=%d deg=%d regressions=%d exercises=%d",
            params.num_paths,
            params.num_steps,
            params.basis_degree,
            regressions,
            exercised,
        )
        return cash_flows

    def price_with_error(self, option: Option) -> tuple[float, float]:
        """Return (present value, standard error of the estimate)."""
        with log_timing(logger, "MC American price", self.params.log_timings):
            pv_pathwise = self.present_value_pathwise(option)
            pv = float(np.mean(pv_pathwise))
        std_error = _standard_error(pv_pathwise)
        _warn_if_high_std_error(
            std_error=std_error,
            pv_mean=pv,
            n_paths=pv_pathwise.size,
            warn_ratio=self.params.std_error_warn_ratio,
            label="American",
        )
        return pv, std_error

    def price(self, option: Option) -> float:
        return self.price_with_error(option)[0]
