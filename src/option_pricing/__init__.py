from .enums import Accuracy, ExerciseType, OptionType
from .exceptions import (
    ArbitrageViolationError,
    ConfigurationError,
    EngineSelectionError,
    MissingObservationError,
    NumericalError,
    OptionPricingError,
    UnsupportedFeatureError,
    ValidationError,
)
from .exercise import AmericanExercise, EuropeanExercise, Exercise
from .payoffs import AsianCallPayoff, AsianPutPayoff, CallPayoff, Payoff, PutPayoff
from .option import Option
from .stochastic_processes import BoxMullerNormals, GBMPathGenerator, GeneratorNormals
from .valuation import (
    BinomialTreeEngine,
    EngineConfig,
    EngineFactory,
    EngineRule,
    FiniteDifferenceEngine,
    LongstaffSchwartzEngine,
    MonteCarloEngine,
    PricingEngine,
    create_engine,
    register_rule,
)
from .greeks import Greeks, compute_greeks
from .utils import put_call_parity_gap, put_call_parity_rhs


__all__ = [
    "Accuracy",
    "ExerciseType",
    "OptionType",
    "OptionPricingError",
    "ValidationError",
    "MissingObservationError",
    "ConfigurationError",
    "UnsupportedFeatureError",
    "EngineSelectionError",
    "NumericalError",
    "ArbitrageViolationError",
    "Exercise",
    "EuropeanExercise",
    "AmericanExercise",
    "Payoff",
    "CallPayoff",
    "PutPayoff",
    "AsianCallPayoff",
    "AsianPutPayoff",
    "Option",
    "BoxMullerNormals",
    "GeneratorNormals",
    "GBMPathGenerator",
    "PricingEngine",
    "BinomialTreeEngine",
    "FiniteDifferenceEngine",
    "MonteCarloEngine",
    "LongstaffSchwartzEngine",
    "EngineConfig",
    "EngineFactory",
    "EngineRule",
    "create_engine",
    "register_rule",
    "Greeks",
    "compute_greeks",
    "put_call_parity_rhs",
    "put_call_parity_gap",
]
