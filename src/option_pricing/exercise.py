"""Exercise-style strategies.

An exercise strategy decides how a node value is derived from its intrinsic
and continuation values. The set is closed: European (no early exercise) and
American (early exercise allowed at every node). Strategies hold no state, so
one instance can be shared by any number of options.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from .enums import ExerciseType
from .exceptions import MissingObservationError

__all__ = ["Exercise", "EuropeanExercise", "AmericanExercise"]


class Exercise(ABC):
    """Base class for exercise strategies.

    Attributes
    ==========
    exercise_type: ExerciseType
        Enum tag of the variant.
    allows_early_exercise: bool
        Capability marker used by engine selection rules.
    """

    exercise_type: ClassVar[ExerciseType]
    allows_early_exercise: ClassVar[bool]

    @abstractmethod
    def value_at_node(
        self,
        intrinsic: np.ndarray | float | None,
        continuation: np.ndarray | float | None,
    ) -> np.ndarray | float:
        """Combine intrinsic and continuation values into the node value."""


@dataclass(frozen=True, slots=True)
class EuropeanExercise(Exercise):
    """Exercise only at maturity; a node is worth its continuation value."""

    exercise_type: ClassVar[ExerciseType] = ExerciseType.EUROPEAN
    allows_early_exercise: ClassVar[bool] = False

    def value_at_node(self, intrinsic, continuation):
        if continuation is None:
            raise MissingObservationError("EuropeanExercise requires a continuation value.")
        return continuation


@dataclass(frozen=True, slots=True)
class AmericanExercise(Exercise):
    """Exercise at any node; a node is worth max(intrinsic, continuation)."""

    exercise_type: ClassVar[ExerciseType] = ExerciseType.AMERICAN
    allows_early_exercise: ClassVar[bool] = True

    def value_at_node(self, intrinsic, continuation):
        if intrinsic is None or continuation is None:
            raise MissingObservationError(
                "AmericanExercise requires both intrinsic and continuation values."
            )
        return np.maximum(intrinsic, continuation)
