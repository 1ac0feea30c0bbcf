"""Parameter classes for method-specific engine configuration.

Each pricing engine has its own parameter class that explicitly documents the
numeric resolution knobs available for that method. ``EngineConfig`` is the
coarse accuracy hint consumed by the engine selection rules.
"""

from dataclasses import dataclass

from ..enums import Accuracy
from ..exceptions import ConfigurationError, ValidationError
from ..utils import require_positive_int

MIN_PDE_TIME_STEPS = 1
MIN_PDE_PRICE_STEPS = 3
MAX_BASIS_DEGREE = 5


def _check_warn_ratio(ratio: float | None) -> None:
    if ratio is not None and ratio <= 0:
        raise ValidationError(f"std_error_warn_ratio must be positive or None, got {ratio}")


@dataclass(frozen=True, slots=True)
class BinomialParams:
    """Parameters for binomial tree valuation.

    Attributes
    ==========
    num_steps:
        Number of time steps in the binomial tree.
        More steps increase accuracy but also computation time.
        Default: 500.
    log_timings:
        Log wall time of each pricing call at DEBUG level.
    """

    num_steps: int = 500
    log_timings: bool = False

    def __post_init__(self):
        require_positive_int(self.num_steps, "num_steps")


@dataclass(frozen=True, slots=True)
class PDEParams:
    """Parameters for Crank-Nicolson finite difference valuation.

    Attributes:
        time_steps: Number of time steps. Default: 100.
        price_steps: Number of spatial (spot price) steps in the grid.
                     The grid has price_steps + 1 nodes. Default: 100.
        smax_mult: Multiplier for the maximum spot price in the grid.
                   Grid extends from 0 to smax_mult * max(spot, strike).
                   Default: 5.0
        max_iter: Policy-iteration cap per time layer (American only). Default: 20
        tol: Convergence tolerance on the max node-value change (American only).
             Default: 1e-8
        log_timings: Log wall time of each pricing call at DEBUG level.
    """

    time_steps: int = 100
    price_steps: int = 100
    smax_mult: float = 5.0
    max_iter: int = 20
    tol: float = 1e-8
    log_timings: bool = False

    def __post_init__(self):
        require_positive_int(self.time_steps, "time_steps", MIN_PDE_TIME_STEPS)
        require_positive_int(self.price_steps, "price_steps", MIN_PDE_PRICE_STEPS)
        require_positive_int(self.max_iter, "max_iter")
        if self.smax_mult <= 1.0:
            raise ValidationError(f"smax_mult must be > 1, got {self.smax_mult}")
        if self.tol <= 0:
            raise ValidationError(f"tol must be positive, got {self.tol}")


@dataclass(frozen=True, slots=True)
class MonteCarloParams:
    """Parameters for plain Monte Carlo valuation.

    Attributes
    ==========
    num_steps:
        Time steps per simulated path. Default: 500.
    num_paths:
        Number of independent paths. Default: 10_000.
    random_seed:
        Random seed for reproducibility. If None, uses fresh entropy per call.
    batch_size:
        Maximum number of paths held in memory at once. Default: 10_000.
    std_error_warn_ratio:
        Log a warning when std_error / |price| exceeds this ratio.
        None disables the check. Default: 0.05.
    log_timings:
        Log wall time of each pricing call at DEBUG level.
    """

    num_steps: int = 500
    num_paths: int = 10_000
    random_seed: int | None = None
    batch_size: int = 10_000
    std_error_warn_ratio: float | None = 0.05
    log_timings: bool = False

    def __post_init__(self):
        require_positive_int(self.num_steps, "num_steps")
        require_positive_int(self.num_paths, "num_paths")
        require_positive_int(self.batch_size, "batch_size")
        _check_warn_ratio(self.std_error_warn_ratio)


@dataclass(frozen=True, slots=True)
class LSMParams:
    """Parameters for Longstaff-Schwartz least-squares Monte Carlo.

    Attributes
    ==========
    num_steps:
        Exercise opportunities (time steps) per path. Default: 100.
    num_paths:
        Number of simulated paths, all held in memory. Default: 10_000.
    basis_degree:
        Polynomial degree for the continuation regression, 1..5.
        1 -> [1, S], 2 -> [1, S, S^2], etc. Default: 2.
    random_seed:
        Random seed for reproducibility. If None, uses fresh entropy per call.
    std_error_warn_ratio:
        Log a warning when std_error / |price| exceeds this ratio.
        None disables the check. Default: 0.05.
    log_timings:
        Log wall time of each pricing call at DEBUG level.
    """

    num_steps: int = 100
    num_paths: int = 10_000
    basis_degree: int = 2
    random_seed: int | None = None
    std_error_warn_ratio: float | None = 0.05
    log_timings: bool = False

    def __post_init__(self):
        require_positive_int(self.num_steps, "num_steps")
        require_positive_int(self.num_paths, "num_paths")
        require_positive_int(self.basis_degree, "basis_degree")
        if self.basis_degree > MAX_BASIS_DEGREE:
            raise ValidationError(
                f"basis_degree must be in 1..{MAX_BASIS_DEGREE}, got {self.basis_degree}"
            )
        _check_warn_ratio(self.std_error_warn_ratio)


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Accuracy hint plus optional overrides consumed by engine selection rules.

    Attributes
    ==========
    accuracy:
        Accuracy tier (FAST / BALANCED / ACCURATE). Strings are coerced.
    steps:
        Overrides the time-step count of whichever engine is chosen.
    paths:
        Overrides the Monte Carlo path count.
    price_steps:
        Overrides the finite difference spot-grid size.
    basis_degree:
        Overrides the Longstaff-Schwartz regression degree (1..5).
    random_seed:
        Seed passed to simulation-based engines.
    """

    accuracy: Accuracy | str = Accuracy.BALANCED
    steps: int | None = None
    paths: int | None = None
    price_steps: int | None = None
    basis_degree: int | None = None
    random_seed: int | None = None

    def __post_init__(self):
        if isinstance(self.accuracy, str):
            try:
                object.__setattr__(self, "accuracy", Accuracy(self.accuracy.lower()))
            except ValueError as exc:
                raise ValidationError(f"Unknown accuracy tier: {self.accuracy!r}") from exc
        if not isinstance(self.accuracy, Accuracy):
            raise ConfigurationError(
                f"accuracy must be Accuracy enum, got {type(self.accuracy).__name__}"
            )
        if self.steps is not None:
            require_positive_int(self.steps, "steps")
        if self.paths is not None:
            require_positive_int(self.paths, "paths")
        if self.price_steps is not None:
            require_positive_int(self.price_steps, "price_steps", MIN_PDE_PRICE_STEPS)
        if self.basis_degree is not None:
            require_positive_int(self.basis_degree, "basis_degree")
            if self.basis_degree > MAX_BASIS_DEGREE:
                raise ValidationError(
                    f"basis_degree must be in 1..{MAX_BASIS_DEGREE}, got {self.basis_degree}"
                )


# Type alias for any engine parameters
ValuationParams = BinomialParams | PDEParams | MonteCarloParams | LSMParams
