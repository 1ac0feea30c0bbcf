"""Enums for option pricing."""

from enum import Enum

__all__ = [
    "OptionType",
    "ExerciseType",
    "Accuracy",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class Accuracy(Enum):
    FAST = "fast"
    BALANCED = "balanced"
    ACCURATE = "accurate"
