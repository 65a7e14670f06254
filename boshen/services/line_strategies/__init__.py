"""Prediction-line strategies, calculator and validators."""

from .types import Interval, LineStrategy, PredictionLine, as_interval
from .calculator import (
    calculate,
    calculate_boshen_lines,
    calculate_fibonacci_lines,
    check_range,
    describe_lines,
    find_nearby,
    get_line_function,
    summarize,
)
from .validation import (
    ValidationResult,
    ensure_structure,
    validate_accuracy,
    validate_structure,
)

__all__ = [
    "Interval",
    "LineStrategy",
    "PredictionLine",
    "ValidationResult",
    "as_interval",
    "calculate",
    "calculate_boshen_lines",
    "calculate_fibonacci_lines",
    "check_range",
    "describe_lines",
    "ensure_structure",
    "find_nearby",
    "get_line_function",
    "summarize",
    "validate_accuracy",
    "validate_structure",
]
