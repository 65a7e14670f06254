"""Boshen prediction-line engine.

Derives ordered price levels from a two-point (low, high) interval, with a
memoizing single-flight cache, a bounded-concurrency batch orchestrator and
a regression harness pinned to canonical vectors.
"""

from boshen.core.exceptions import (
    AccuracyRegressionError,
    InvalidRangeError,
    InvalidRangeReason,
    PredictionEngineError,
    StructuralViolationError,
)
from boshen.engine import PredictionEngine, get_engine
from boshen.services.line_strategies import (
    Interval,
    LineStrategy,
    PredictionLine,
    calculate,
    find_nearby,
)

__all__ = [
    "AccuracyRegressionError",
    "Interval",
    "InvalidRangeError",
    "InvalidRangeReason",
    "LineStrategy",
    "PredictionEngine",
    "PredictionEngineError",
    "PredictionLine",
    "StructuralViolationError",
    "calculate",
    "find_nearby",
    "get_engine",
]
