"""Finite difference (PDE) valuation.

Current scope
-------------
Crank-Nicolson finite differences on a uniform spot grid for vanilla
European and American call/put:
- terminal layer = payoff on every grid node, marched backward to t = 0
- Dirichlet boundaries at S = 0 and S = Smax
- tridiagonal systems solved directly with the Thomas algorithm
- American exercise via policy iteration on the free boundary
- price at spot by linear interpolation, clamped at the grid edges
"""

from __future__ import annotations

from typing import NamedTuple
import logging
import math

import numpy as np

from ..enums import OptionType
from ..exceptions import UnsupportedFeatureError, ValidationError
from ..exercise import AmericanExercise, EuropeanExercise
from ..option import Option
from ..utils import log_timing
from .base import PricingEngine
from .params import PDEParams

logger = logging.getLogger(__name__)

# Nodes whose continuation is within this margin of intrinsic count as exercised
ACTIVE_TOLERANCE = 1e-12


def _solve_tridiagonal_thomas(
    lower: np.ndarray,
    diag: np.ndarray,
    upper: np.ndarray,
    rhs: np.ndarray,
) -> np.ndarray:
    """Solve a tridiagonal system Ax = rhs via the Thomas algorithm.

    A has:
      - lower: subdiagonal (length n-1)  -> A[i, i-1]
      - diag:  main diagonal (length n)  -> A[i, i]
      - upper: superdiagonal (length n-1)-> A[i, i+1]
    """
    n = diag.size
    if rhs.size != n:
        raise ValidationError("rhs length must match diag length")
    if lower.size != n - 1 or upper.size != n - 1:
        raise ValidationError("lower/upper must have length n-1")

    # Plain lists are copies (inputs stay untouched) and index much faster than arrays
    b = lower.tolist()
    d = diag.tolist()
    c = upper.tolist()
    y = rhs.tolist()

    # Forward elimination
    for i in range(1, n):
        w = b[i - 1] / d[i - 1]
        d[i] -= w * c[i - 1]
        y[i] -= w * y[i - 1]

    # Back substitution
    x = [0.0] * n
    x[-1] = y[-1] / d[-1]
    for i in range(n - 2, -1, -1):
        x[i] = (y[i] - c[i] * x[i + 1]) / d[i]
    return np.array(x, dtype=float)


def _boundary_values(
    *,
    option_type: OptionType,
    strike: float,
    smax: float,
    df_tT: float,
    dq_tT: float,
    early_exercise: bool,
) -> tuple[float, float]:
    """Dirichlet values at S = 0 (left) and S = Smax (right) with tau years remaining."""
    if option_type is OptionType.PUT:
        left = strike if early_exercise else strike * df_tT
        right = 0.0
    else:
        left = 0.0
        continuation = smax * dq_tT - strike * df_tT
        intrinsic = smax - strike
        right = max(continuation, intrinsic) if early_exercise else max(continuation, 0.0)
    return float(left), float(right)


def _crank_nicolson_coeffs(
    *,
    spot_values: np.ndarray,
    dS: float,
    dt: float,
    risk_free_rate: float,
    dividend_rate: float,
    volatility: float,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Half-step stencil weights (a, b, c) at the interior nodes.

    The explicit half reads ``a V[i-1] + (1 + b) V[i] + c V[i+1]`` and the
    implicit half is the matrix with bands ``(-a, 1 - b, -c)``.
    """
    diffusion = 0.5 * volatility**2 * spot_values**2 / dS**2
    drift = (risk_free_rate - dividend_rate) * spot_values / (2.0 * dS)
    a = 0.5 * dt * (diffusion - drift)
    b = -0.5 * dt * (2.0 * diffusion + risk_free_rate)
    c = 0.5 * dt * (diffusion + drift)
    return a, b, c


def _policy_iteration(
    lower: np.ndarray,
    diag: np.ndarray,
    upper: np.ndarray,
    rhs: np.ndarray,
    exercise_values: np.ndarray,
    max_iter: int,
    tol: float,
) -> tuple[np.ndarray, int, bool]:
    """Resolve the early-exercise constraint V >= payoff for one time layer.

    Seeds the continuation estimate with the unconstrained (European) solve,
    then alternates between pinning the nodes where exercise dominates
    (identity rows with the payoff as right-hand side) and re-solving the
    system, projecting every node up to its intrinsic value.

    Returns the interior values, the number of iterations used, and whether
    the active set and values settled within ``max_iter``.
    """
    guess = _solve_tridiagonal_thomas(lower, diag, upper, rhs)
    previous_active: np.ndarray | None = None

    for iter_idx in range(max_iter):
        active = guess <= exercise_values + ACTIVE_TOLERANCE

        pinned_lower = lower.copy()
        pinned_diag = diag.copy()
        pinned_upper = upper.copy()
        pinned_rhs = rhs.copy()
        pinned_diag[active] = 1.0
        pinned_rhs[active] = exercise_values[active]
        pinned_lower[active[1:]] = 0.0
        pinned_upper[active[:-1]] = 0.0

        solution = _solve_tridiagonal_thomas(pinned_lower, pinned_diag, pinned_upper, pinned_rhs)
        solution = np.maximum(solution, exercise_values)

        stable = previous_active is not None and np.array_equal(active, previous_active)
        change = float(np.max(np.abs(solution - guess)))
        previous_active = active
        guess = solution
        if stable and change < tol:
            return guess, iter_idx + 1, True

    return guess, max_iter, False


def _interpolate_price(spot: float, grid: np.ndarray, values: np.ndarray) -> float:
    """Linear interpolation of the value layer at *spot*; no extrapolation past the edges."""
    if spot <= grid[0]:
        return float(values[0])
    if spot >= grid[-1]:
        return float(values[-1])
    return float(np.interp(spot, grid, values))


class PDESolution(NamedTuple):
    """Result of a finite difference solve at t = 0.

    Attributes
    ==========
    price: float
        value interpolated at the option's spot
    grid: np.ndarray
        spot grid, shape (price_steps + 1,)
    values: np.ndarray
        option values on the grid, shape (price_steps + 1,)
    unconverged_layers: int
        American time layers that hit the policy-iteration cap
    """

    price: float
    grid: np.ndarray
    values: np.ndarray
    unconverged_layers: int = 0


class FiniteDifferenceEngine(PricingEngine):
    """Crank-Nicolson solver of the Black-Scholes PDE.

    Supports vanilla payoffs under European or American exercise. For American
    exercise, layers where policy iteration reaches ``max_iter`` without
    settling are accepted as they stand (counted and logged, not raised).
    """

    def __init__(
        self,
        time_steps: int = 100,
        price_steps: int = 100,
        *,
        smax_mult: float = 5.0,
        max_iter: int = 20,
        tol: float = 1e-8,
        log_timings: bool = False,
    ) -> None:
        self.params = PDEParams(
            time_steps=time_steps,
            price_steps=price_steps,
            smax_mult=smax_mult,
            max_iter=max_iter,
            tol=tol,
            log_timings=log_timings,
        )

    @property
    def time_steps(self) -> int:
        return self.params.time_steps

    @property
    def price_steps(self) -> int:
        return self.params.price_steps

    def _validate(self, option: Option) -> bool:
        """Check capabilities and return True for early exercise."""
        self._check_option(option)
        self._reject_path_dependent(option)
        if isinstance(option.exercise, AmericanExercise):
            return True
        if isinstance(option.exercise, EuropeanExercise):
            return False
        raise UnsupportedFeatureError(
            f"{self.name} supports only European or American exercise, "
            f"got {type(option.exercise).__name__}."
        )

    def solve(self, option: Option) -> PDESolution:
        """Compute the full FD solution on the spot grid at t = 0."""
        early_exercise = self._validate(option)
        params = self.params
        logger.debug(
            "PDE %s time_steps=%d price_steps=%d",
            type(option.exercise).__name__,
            params.time_steps,
            params.price_steps,
        )

        spot = option.spot
        strike = option.strike
        rate = option.rate
        dividend_yield = option.dividend_yield
        maturity = option.maturity
        option_type = option.payoff.option_type

        M = params.price_steps
        N = params.time_steps
        smax = float(params.smax_mult * max(spot, strike))
        dS = smax / M
        dt = maturity / N
        grid = np.linspace(0.0, smax, M + 1)

        payoff_grid = np.asarray(option.payoff.value(strike, spot=grid), dtype=float)
        exercise_interior = payoff_grid[1:-1]

        a, b, c = _crank_nicolson_coeffs(
            spot_values=grid[1:-1],
            dS=dS,
            dt=dt,
            risk_free_rate=rate,
            dividend_rate=dividend_yield,
            volatility=option.volatility,
        )
        lower = -a[1:]
        diag = 1.0 - b
        upper = -c[:-1]

        # Two layer buffers swapped each step: V holds t_{n+1}, V_next receives t_n
        V = payoff_grid.copy()
        V_next = np.empty_like(V)
        unconverged = 0
        total_iters = 0

        for n in range(N - 1, -1, -1):
            tau = maturity - n * dt
            left, right = _boundary_values(
                option_type=option_type,
                strike=strike,
                smax=smax,
                df_tT=math.exp(-rate * tau),
                dq_tT=math.exp(-dividend_yield * tau),
                early_exercise=early_exercise,
            )

            rhs = a * V[:-2] + (1.0 + b) * V[1:-1] + c * V[2:]
            rhs[0] += a[0] * left
            rhs[-1] += c[-1] * right

            if early_exercise:
                interior, iters, converged = _policy_iteration(
                    lower,
                    diag,
                    upper,
                    rhs,
                    exercise_interior,
                    params.max_iter,
                    params.tol,
                )
                total_iters += iters
                if not converged:
                    unconverged += 1
            else:
                interior = _solve_tridiagonal_thomas(lower, diag, upper, rhs)

            V_next[0] = left
            V_next[1:-1] = interior
            V_next[-1] = right
            V, V_next = V_next, V

        if early_exercise:
            logger.debug(
                "PDE policy iteration layers=%d avg_iters=%.2f not_converged=%d",
                N,
                total_iters / N,
                unconverged,
            )

        price = _interpolate_price(spot, grid, V)
        return PDESolution(price=price, grid=grid, values=V, unconverged_layers=unconverged)

    def price(self, option: Option) -> float:
        with log_timing(logger, "PDE price", self.params.log_timings):
            solution = self.solve(option)
        return solution.price
