"Path simulation for geometric Brownian motion"

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol
import math

import numpy as np

from .exceptions import ValidationError
from .utils import require_positive_int

if TYPE_CHECKING:
    from .option import Option

__all__ = [
    "NormalSource",
    "BoxMullerNormals",
    "GeneratorNormals",
    "NormalSourceFactory",
    "GBMPathGenerator",
]


class NormalSource(Protocol):
    """Source of independent standard normal draws."""

    def standard_normals(self, size: int | tuple[int, ...]) -> np.ndarray: ...


class BoxMullerNormals:
    """Standard normals via the Box-Muller transform of two uniform draws.

    Each instance owns its own ``numpy.random.Generator``. Instances are not
    meant to be shared between threads; engines build a fresh one per
    pricing call from their seed.
    """

    def __init__(self, random_seed: int | None = None) -> None:
        self.random_seed = random_seed
        self._rng = np.random.default_rng(random_seed)

    def standard_normals(self, size: int | tuple[int, ...]) -> np.ndarray:
        # 1 - U lies in (0, 1], keeping log() finite
        u1 = 1.0 - self._rng.random(size)
        u2 = 1.0 - self._rng.random(size)
        return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)


class GeneratorNormals:
    """Standard normals from numpy's native Gaussian sampler."""

    def __init__(self, random_seed: int | None = None) -> None:
        self.random_seed = random_seed
        self._rng = np.random.default_rng(random_seed)

    def standard_normals(self, size: int | tuple[int, ...]) -> np.ndarray:
        return self._rng.standard_normal(size)


# Callable building a fresh source from an optional seed (e.g. a class above)
NormalSourceFactory = Callable[[int | None], NormalSource]


@dataclass(frozen=True, slots=True)
class GBMPathGenerator:
    """Exact lognormal stepping of geometric Brownian motion.

    S_i = S_{i-1} * exp((r - q - 0.5 sigma^2) dt + sigma sqrt(dt) Z_i),  dt = T / num_steps

    Attributes
    ==========
    spot: float
        initial price S_0
    rate, dividend_yield, volatility: float
        risk-neutral drift inputs and diffusion coefficient
    maturity: float
        simulation horizon in years
    num_steps: int
        number of time steps; each path has num_steps + 1 observations
    normals: NormalSource
        source of the Z draws
    """

    spot: float
    rate: float
    dividend_yield: float
    volatility: float
    maturity: float
    num_steps: int
    normals: NormalSource

    def __post_init__(self) -> None:
        if self.spot <= 0:
            raise ValidationError("spot must be positive")
        if self.maturity <= 0:
            raise ValidationError("maturity must be positive")
        if self.volatility <= 0:
            raise ValidationError("volatility must be positive")
        require_positive_int(self.num_steps, "num_steps")

    @classmethod
    def from_option(
        cls, option: Option, num_steps: int, normals: NormalSource
    ) -> "GBMPathGenerator":
        return cls(
            spot=option.spot,
            rate=option.rate,
            dividend_yield=option.dividend_yield,
            volatility=option.volatility,
            maturity=option.maturity,
            num_steps=num_steps,
            normals=normals,
        )

    @property
    def dt(self) -> float:
        return self.maturity / self.num_steps

    def _log_increments(self, z: np.ndarray) -> np.ndarray:
        drift = (self.rate - self.dividend_yield - 0.5 * self.volatility**2) * self.dt
        diffusion = self.volatility * math.sqrt(self.dt)
        return drift + diffusion * z

    def generate_path(self) -> np.ndarray:
        """Return one path of shape (num_steps + 1,) starting at spot."""
        z = self.normals.standard_normals(self.num_steps)
        path = np.empty(self.num_steps + 1, dtype=float)
        path[0] = self.spot
        path[1:] = self.spot * np.exp(np.cumsum(self._log_increments(z)))
        return path

    def generate_paths(self, num_paths: int) -> np.ndarray:
        """Return independent paths of shape (num_paths, num_steps + 1)."""
        num_paths = require_positive_int(num_paths, "num_paths")
        z = self.normals.standard_normals((num_paths, self.num_steps))
        paths = np.empty((num_paths, self.num_steps + 1), dtype=float)
        paths[:, 0] = self.spot
        paths[:, 1:] = self.spot * np.exp(np.cumsum(self._log_increments(z), axis=1))
        return paths
