"""Core exception classes for the prediction-line engine."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boshen.services.regression import RegressionReport


class InvalidRangeReason(str, Enum):
    """Why an interval was rejected before any computation."""

    NOT_FINITE = "not_finite"
    NON_POSITIVE = "non_positive"
    EQUAL_BOUNDS = "equal_bounds"
    INVERTED_BOUNDS = "inverted_bounds"
    SPAN_TOO_NARROW = "span_too_narrow"


_REASON_MESSAGES = {
    InvalidRangeReason.NOT_FINITE: "prices must be finite numbers",
    InvalidRangeReason.NON_POSITIVE: "prices must be greater than 0",
    InvalidRangeReason.EQUAL_BOUNDS: "high must differ from low",
    InvalidRangeReason.INVERTED_BOUNDS: "high must be greater than low",
    InvalidRangeReason.SPAN_TOO_NARROW: "interval is too narrow to separate the lines",
}


class PredictionEngineError(Exception):
    """Base exception for prediction-line engine operations."""

    pass


class InvalidRangeError(PredictionEngineError):
    """Raised when an interval cannot produce prediction lines.

    Attributes:
        reason: The violated precondition
        low: Offending low price
        high: Offending high price
    """

    def __init__(self, reason: InvalidRangeReason, low: float, high: float):
        self.reason = reason
        self.low = low
        self.high = high
        super().__init__(f"Invalid range (low={low}, high={high}): {_REASON_MESSAGES[reason]}")


class StructuralViolationError(PredictionEngineError):
    """Raised when computed lines break a structural invariant.

    This signals a defect in the calculator, never a user error.
    """

    def __init__(self, messages: list[str], low: float | None = None, high: float | None = None):
        self.messages = list(messages)
        self.low = low
        self.high = high
        super().__init__(
            f"Structural violation for (low={low}, high={high}): " + "; ".join(self.messages)
        )


class AccuracyRegressionError(PredictionEngineError):
    """Raised by the regression harness when output drifts from canonical vectors."""

    def __init__(self, report: "RegressionReport"):
        self.report = report
        failed = [case.name for case in report.case_results if not case.is_valid]
        super().__init__(
            f"Accuracy regression: max error {report.max_error:.4f}% "
            f"(failed cases: {', '.join(failed) or 'none'})"
        )
