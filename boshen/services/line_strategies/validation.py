"""Rule-based and accuracy-based validation of prediction lines.

The rule validator needs no reference data and is expected to pass on every
sequence the calculator produces. The accuracy validator compares against an
externally supplied reference and is used only by the regression harness.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from boshen.core.constants import BOSHEN_RATIO_TABLE, AccuracyThresholds, RatioTable
from boshen.core.exceptions import StructuralViolationError

from .types import PredictionLine


class ReferenceLine(Protocol):
    """Shape shared by computed lines and canonical expected lines."""

    name: str
    ratio: float
    price: float


@dataclass
class ValidationResult:
    """Outcome of a validation pass.

    Attributes:
        is_valid: True when every check passed
        messages: One entry per failed check
        max_error_percent: Worst per-line relative price error (accuracy only)
        average_error_percent: Mean per-line relative price error (accuracy only)
    """

    is_valid: bool
    messages: list[str] = field(default_factory=list)
    max_error_percent: float = 0.0
    average_error_percent: float = 0.0

    @property
    def message(self) -> str | None:
        return "; ".join(self.messages) if self.messages else None


def validate_structure(
    lines: Sequence[PredictionLine],
    table: RatioTable = BOSHEN_RATIO_TABLE,
) -> ValidationResult:
    """Check structural invariants of a computed sequence.

    Checks line count, index order, strict price increase, levels above the
    B line for every ratio greater than 1, the key-line index set and the
    ratio constants of ``table``.

    Args:
        lines: Computed lines
        table: Ratio table the lines were produced from

    Returns:
        ValidationResult with one message per violation
    """
    if len(lines) != len(table):
        return ValidationResult(
            is_valid=False,
            messages=[f"expected {len(table)} lines, got {len(lines)}"],
        )

    messages: list[str] = []

    for position, line in enumerate(lines):
        if line.index != position:
            messages.append(f"{line.name} has index {line.index} at position {position}")

    for current, following in zip(lines, lines[1:]):
        if current.price >= following.price:
            messages.append(
                f"prices must increase: {current.name}({current.price:.6f}) >= "
                f"{following.name}({following.price:.6f})"
            )

    if 1.0 in table.ratios:
        b_price = lines[table.ratios.index(1.0)].price
        for line in lines:
            if line.ratio > 1.0 and line.price <= b_price:
                messages.append(
                    f"{line.name}({line.price:.6f}) must be above the B line ({b_price:.6f})"
                )

    key_indices = {line.index for line in lines if line.is_key_line}
    if key_indices != table.key_indices:
        messages.append(
            f"key lines must be {sorted(table.key_indices)}, got {sorted(key_indices)}"
        )

    for line, expected_ratio in zip(lines, table.ratios):
        if abs(line.ratio - expected_ratio) > AccuracyThresholds.RATIO_TOLERANCE:
            messages.append(
                f"{line.name} ratio mismatch: expected={expected_ratio:.3f}, actual={line.ratio:.3f}"
            )

    return ValidationResult(is_valid=not messages, messages=messages)


def ensure_structure(
    lines: Sequence[PredictionLine],
    table: RatioTable = BOSHEN_RATIO_TABLE,
    low: float | None = None,
    high: float | None = None,
) -> None:
    """Raise if ``lines`` break a structural invariant.

    Raises:
        StructuralViolationError: With every violated invariant
    """
    result = validate_structure(lines, table)
    if not result.is_valid:
        raise StructuralViolationError(result.messages, low=low, high=high)


def validate_accuracy(
    computed: Sequence[ReferenceLine],
    expected: Sequence[ReferenceLine],
) -> ValidationResult:
    """Compare computed lines against a reference sequence.

    A line passes when its price is within ``PRICE_TOLERANCE``, its ratio is
    within ``RATIO_TOLERANCE`` and its name matches. The whole sequence passes
    when every line passes and the worst relative price error stays below
    ``MAX_ERROR_PERCENT``.

    Args:
        computed: Lines produced by the calculator
        expected: Reference lines of the same shape

    Returns:
        ValidationResult with max/average relative price error in percent
    """
    if len(computed) != len(expected):
        return ValidationResult(
            is_valid=False,
            messages=[f"line count mismatch: computed={len(computed)}, expected={len(expected)}"],
            max_error_percent=float("inf"),
            average_error_percent=float("inf"),
        )
    if not expected:
        return ValidationResult(is_valid=False, messages=["no reference lines"])

    messages: list[str] = []
    error_percents: list[float] = []

    for actual, reference in zip(computed, expected):
        price_error = abs(actual.price - reference.price)
        if reference.price > 0:
            error_percents.append(price_error / reference.price * 100.0)
        else:
            error_percents.append(0.0 if price_error == 0 else float("inf"))

        if actual.name != reference.name:
            messages.append(f"name mismatch: computed={actual.name}, expected={reference.name}")
        if price_error > AccuracyThresholds.PRICE_TOLERANCE:
            messages.append(
                f"{actual.name} price error too large: computed={actual.price:.4f}, "
                f"expected={reference.price:.4f}, error={price_error:.4f}"
            )
        ratio_error = abs(actual.ratio - reference.ratio)
        if ratio_error > AccuracyThresholds.RATIO_TOLERANCE:
            messages.append(
                f"{actual.name} ratio error too large: computed={actual.ratio:.3f}, "
                f"expected={reference.ratio:.3f}"
            )

    max_error_percent = max(error_percents)
    if max_error_percent >= AccuracyThresholds.MAX_ERROR_PERCENT:
        messages.append(
            f"max error {max_error_percent:.4f}% exceeds {AccuracyThresholds.MAX_ERROR_PERCENT}%"
        )

    return ValidationResult(
        is_valid=not messages,
        messages=messages,
        max_error_percent=max_error_percent,
        average_error_percent=sum(error_percents) / len(error_percents),
    )
