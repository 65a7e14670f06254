"""Regression harness pinning calculator output to canonical vectors.

Any change to a ratio table or to the line formula must keep
``run_standard_cases().raise_for_regression()`` passing. The expected values
below are literal and hand-verified; they are deliberately not derived from
``boshen.core.constants``.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from boshen.core.constants import AccuracyThresholds
from boshen.core.exceptions import AccuracyRegressionError, InvalidRangeError
from boshen.services.line_strategies import (
    PredictionLine,
    calculate_boshen_lines,
    validate_accuracy,
)
from boshen.utils.structured_logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExpectedLine:
    """Reference value for one line of a canonical vector."""

    name: str
    price: float
    ratio: float


@dataclass(frozen=True)
class CanonicalVector:
    """Hand-verified ``(low, high) -> expected lines`` case."""

    name: str
    low: float
    high: float
    expected: tuple[ExpectedLine, ...]


CANONICAL_VECTORS: tuple[CanonicalVector, ...] = (
    CanonicalVector(
        name="case 1 (A=98.02, B=98.75)",
        low=98.02,
        high=98.75,
        expected=(
            ExpectedLine("A line", 98.02, 0.0),
            ExpectedLine("B line", 98.75, 1.0),
            ExpectedLine("line 1", 99.37, 1.849),
            ExpectedLine("line 2", 99.77, 2.397),
            ExpectedLine("line 3", 100.31, 3.137),
            ExpectedLine("line 4", 100.50, 3.401),
            ExpectedLine("line 5", 100.94, 4.000),
            ExpectedLine("line 6", 101.47, 4.726),
            ExpectedLine("line 7", 101.85, 5.247),
            ExpectedLine("line 8", 102.42, 6.027),
            ExpectedLine("extreme line", 102.99, 6.808),
        ),
    ),
    CanonicalVector(
        name="case 2 (A=96.25, B=97.06)",
        low=96.25,
        high=97.06,
        expected=(
            ExpectedLine("A line", 96.25, 0.0),
            ExpectedLine("B line", 97.06, 1.0),
            ExpectedLine("line 1", 97.75, 1.849),
            ExpectedLine("line 2", 98.19, 2.397),
            ExpectedLine("line 3", 98.79, 3.137),
            ExpectedLine("line 4", 99.00, 3.401),
            ExpectedLine("line 5", 99.49, 4.000),
            ExpectedLine("line 6", 100.08, 4.726),
            ExpectedLine("line 7", 100.50, 5.247),
            ExpectedLine("line 8", 101.13, 6.027),
            ExpectedLine("extreme line", 101.76, 6.808),
        ),
    ),
)


@dataclass
class CaseResult:
    """Outcome of one canonical vector."""

    name: str
    is_valid: bool
    message: str | None = None
    max_error_percent: float = 0.0
    average_error_percent: float = 0.0


@dataclass
class RegressionReport:
    """Aggregated outcome of a regression run.

    Attributes:
        case_results: One entry per canonical vector
        max_error: Worst per-line relative price error across all cases (percent)
        average_error: Mean of the per-case average relative errors (percent)
        meets_accuracy_requirement: Every case stays below the max error threshold
        tested_at: When the run finished
    """

    case_results: list[CaseResult]
    max_error: float
    average_error: float
    meets_accuracy_requirement: bool
    tested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_valid(self) -> bool:
        return all(case.is_valid for case in self.case_results)

    def raise_for_regression(self) -> None:
        """Raise if any case drifted beyond tolerance.

        Raises:
            AccuracyRegressionError: With this report attached
        """
        if not (self.is_valid and self.meets_accuracy_requirement):
            raise AccuracyRegressionError(self)

    def summary(self) -> str:
        """Human-readable report."""
        lines = [
            "Boshen regression results:",
            f"Overall: {'passed' if self.is_valid else 'failed'}",
            f"Max error: {self.max_error:.4f}%",
            f"Average error: {self.average_error:.4f}%",
            f"Accuracy requirement: {'met' if self.meets_accuracy_requirement else 'not met'} "
            f"(error < {AccuracyThresholds.MAX_ERROR_PERCENT}%)",
            f"Cases: {len(self.case_results)}",
        ]
        for case in self.case_results:
            line = f"  {case.name}: {'passed' if case.is_valid else 'failed'}"
            if not case.is_valid and case.message:
                line += f" - {case.message}"
            lines.append(line)
        return "\n".join(lines)


def run_case(
    vector: CanonicalVector,
    calculate: Callable[[float, float], Sequence[PredictionLine]] = calculate_boshen_lines,
) -> CaseResult:
    """Run the calculator on one vector and compare against its expected lines."""
    try:
        computed = calculate(vector.low, vector.high)
    except InvalidRangeError as e:
        return CaseResult(
            name=vector.name,
            is_valid=False,
            message=str(e),
            max_error_percent=float("inf"),
            average_error_percent=float("inf"),
        )

    result = validate_accuracy(computed, vector.expected)
    return CaseResult(
        name=vector.name,
        is_valid=result.is_valid,
        message=result.message,
        max_error_percent=result.max_error_percent,
        average_error_percent=result.average_error_percent,
    )


def run_standard_cases(
    vectors: Sequence[CanonicalVector] = CANONICAL_VECTORS,
    calculate: Callable[[float, float], Sequence[PredictionLine]] = calculate_boshen_lines,
) -> RegressionReport:
    """Run every canonical vector and aggregate the results.

    Args:
        vectors: Canonical vectors to check
        calculate: Line function under test

    Returns:
        RegressionReport; call ``raise_for_regression()`` to gate on it
    """
    case_results = [run_case(vector, calculate) for vector in vectors]

    if case_results:
        max_error = max(case.max_error_percent for case in case_results)
        average_error = sum(case.average_error_percent for case in case_results) / len(case_results)
    else:
        max_error = 0.0
        average_error = 0.0

    report = RegressionReport(
        case_results=case_results,
        max_error=max_error,
        average_error=average_error,
        meets_accuracy_requirement=all(
            case.max_error_percent < AccuracyThresholds.MAX_ERROR_PERCENT
            for case in case_results
        ),
    )

    log_event = logger.info if report.is_valid and report.meets_accuracy_requirement else logger.error
    log_event(
        "regression.completed",
        cases=len(case_results),
        failed=[case.name for case in case_results if not case.is_valid],
        max_error_percent=round(max_error, 6),
        average_error_percent=round(average_error, 6),
        meets_accuracy_requirement=report.meets_accuracy_requirement,
    )
    return report
