"""Prediction-line calculator.

Every strategy is a pure function with the signature
``(low, high) -> tuple[PredictionLine, ...]``. Identical inputs always
produce identical output; no clock, randomness or shared state is involved.
"""

import math
from collections.abc import Callable, Sequence

from boshen.core.constants import (
    BOSHEN_RATIO_TABLE,
    FIBONACCI_RATIO_TABLE,
    CalculationLimits,
    RatioTable,
)
from boshen.core.exceptions import InvalidRangeError, InvalidRangeReason

from .types import LineStrategy, PredictionLine
from .validation import ensure_structure

LineFunction = Callable[[float, float], tuple[PredictionLine, ...]]


def check_range(low: float, high: float) -> None:
    """Reject intervals that cannot produce prediction lines.

    Checks run in a fixed order so that each input maps to exactly one reason.

    Raises:
        InvalidRangeError: With the first violated precondition
    """
    if not (math.isfinite(low) and math.isfinite(high)):
        raise InvalidRangeError(InvalidRangeReason.NOT_FINITE, low, high)
    if low <= 0 or high <= 0:
        raise InvalidRangeError(InvalidRangeReason.NON_POSITIVE, low, high)
    if high == low:
        raise InvalidRangeError(InvalidRangeReason.EQUAL_BOUNDS, low, high)
    if high < low:
        raise InvalidRangeError(InvalidRangeReason.INVERTED_BOUNDS, low, high)
    if high - low < high * CalculationLimits.MIN_RELATIVE_SPAN:
        raise InvalidRangeError(InvalidRangeReason.SPAN_TOO_NARROW, low, high)


def project_lines(table: RatioTable, low: float, high: float) -> tuple[PredictionLine, ...]:
    """Project every ratio of ``table`` onto the interval.

    Ratios 0.0 and 1.0 map exactly onto ``low`` and ``high``.
    """
    span = high - low
    lines = []
    for index, (name, ratio) in enumerate(zip(table.names, table.ratios)):
        if ratio == 0.0:
            price = low
        elif ratio == 1.0:
            price = high
        else:
            price = low + ratio * span
        lines.append(
            PredictionLine(
                index=index,
                name=name,
                ratio=ratio,
                price=price,
                is_key_line=index in table.key_indices,
            )
        )
    return tuple(lines)


def calculate_boshen_lines(low: float, high: float) -> tuple[PredictionLine, ...]:
    """Calculate the eleven Boshen lines for an interval.

    Args:
        low: A point price
        high: B point price

    Returns:
        Eleven lines ordered from the A line to the extreme line

    Raises:
        InvalidRangeError: If the interval is rejected
        StructuralViolationError: If the result breaks a structural invariant
    """
    check_range(low, high)
    lines = project_lines(BOSHEN_RATIO_TABLE, low, high)
    ensure_structure(lines, BOSHEN_RATIO_TABLE, low=low, high=high)
    return lines


def calculate_fibonacci_lines(low: float, high: float) -> tuple[PredictionLine, ...]:
    """Calculate Fibonacci retracement and extension levels over an interval."""
    check_range(low, high)
    lines = project_lines(FIBONACCI_RATIO_TABLE, low, high)
    ensure_structure(lines, FIBONACCI_RATIO_TABLE, low=low, high=high)
    return lines


STRATEGY_FUNCTIONS: dict[LineStrategy, LineFunction] = {
    LineStrategy.BOSHEN: calculate_boshen_lines,
    LineStrategy.FIBONACCI: calculate_fibonacci_lines,
}

STRATEGY_TABLES: dict[LineStrategy, RatioTable] = {
    LineStrategy.BOSHEN: BOSHEN_RATIO_TABLE,
    LineStrategy.FIBONACCI: FIBONACCI_RATIO_TABLE,
}


def get_line_function(strategy: LineStrategy | str = LineStrategy.BOSHEN) -> LineFunction:
    """Resolve the pure line function for a strategy.

    Raises:
        ValueError: If ``strategy`` is not a known LineStrategy value
    """
    return STRATEGY_FUNCTIONS[LineStrategy(strategy)]


def calculate(
    low: float,
    high: float,
    strategy: LineStrategy | str = LineStrategy.BOSHEN,
) -> tuple[PredictionLine, ...]:
    """Calculate prediction lines for ``(low, high)`` with the given strategy."""
    return get_line_function(strategy)(low, high)


def find_nearby(
    lines: Sequence[PredictionLine],
    current_price: float,
    tolerance_percent: float = 0.1,
) -> list[PredictionLine]:
    """Return lines within ``tolerance_percent`` of ``current_price``.

    Matches are ordered by absolute distance, closest first. A non-positive
    ``current_price`` matches nothing.
    """
    if not lines or current_price <= 0:
        return []

    nearby = [line for line in lines if line.is_near(current_price, tolerance_percent)]
    return sorted(nearby, key=lambda line: line.distance_from(current_price))


def describe_lines(lines: Sequence[PredictionLine]) -> list[str]:
    """One detail string per line: name, price, ratio and key/normal marker."""
    return [
        f"{line.name}: {line.price:.2f} (ratio: {line.ratio:.3f}, "
        f"{'key line' if line.is_key_line else 'normal line'})"
        for line in lines
    ]


def summarize(lines: Sequence[PredictionLine]) -> str:
    """Build a short analysis summary for a computed Boshen sequence.

    Args:
        lines: Output of ``calculate_boshen_lines``

    Returns:
        Multi-line text with the A/B points, span, key lines and extreme line
    """
    if len(lines) < 2:
        return "No prediction lines"

    low, high = lines[0].price, lines[1].price
    parts = [
        "Boshen line analysis:",
        f"A point: {low:.2f}, B point: {high:.2f}",
        f"AB span: {high - low:.2f}",
        "Key lines:",
    ]
    parts.extend(f"  {line.name}: {line.price:.2f}" for line in lines if line.is_key_line)
    parts.append(f"{lines[-1].name}: {lines[-1].price:.2f}")
    return "\n".join(parts)
