"""Ratio tables and numeric thresholds.

The ratio tables are opaque, versioned constants. Any change to a table must
be accompanied by updated canonical vectors in ``boshen.services.regression``
and a passing regression run.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RatioTable:
    """Immutable table of line multipliers.

    Attributes:
        version: Opaque identifier for this exact set of ratios
        names: Display name for each line, index-aligned with ``ratios``
        ratios: Dimensionless multipliers applied to the interval span
        key_indices: Indices of lines highlighted to the analyst
    """

    version: str
    names: tuple[str, ...]
    ratios: tuple[float, ...]
    key_indices: frozenset[int]

    def __post_init__(self) -> None:
        if len(self.names) != len(self.ratios):
            raise ValueError(
                f"Ratio table {self.version}: {len(self.names)} names "
                f"for {len(self.ratios)} ratios"
            )

    def __len__(self) -> int:
        return len(self.ratios)


BOSHEN_RATIO_TABLE = RatioTable(
    version="boshen-11/1",
    names=(
        "A line",
        "B line",
        "line 1",
        "line 2",
        "line 3",
        "line 4",
        "line 5",
        "line 6",
        "line 7",
        "line 8",
        "extreme line",
    ),
    ratios=(
        0.0,  # A line (interval low)
        1.0,  # B line (interval high)
        1.849,
        2.397,
        3.137,
        3.401,
        4.000,
        4.726,
        5.247,
        6.027,
        6.808,
    ),
    key_indices=frozenset({3, 6, 8}),
)

FIBONACCI_RATIO_TABLE = RatioTable(
    version="fibonacci-10/1",
    names=(
        "F23.6",
        "F38.2",
        "F50.0",
        "F61.8",
        "F78.6",
        "F100.0",
        "F127.2",
        "F161.8",
        "F200.0",
        "F261.8",
    ),
    ratios=(0.236, 0.382, 0.5, 0.618, 0.786, 1.0, 1.272, 1.618, 2.0, 2.618),
    key_indices=frozenset(),
)


class AccuracyThresholds:
    """Tolerances used when comparing computed lines against reference lines."""

    PRICE_TOLERANCE = 0.01
    """Maximum absolute price difference per line."""

    RATIO_TOLERANCE = 0.001
    """Maximum absolute ratio difference per line."""

    MAX_ERROR_PERCENT = 0.1
    """Upper bound (exclusive) on the worst per-line relative price error, in percent."""


class CalculationLimits:
    """Numeric limits for the line calculator."""

    MIN_RELATIVE_SPAN = 1e-12
    """
    Smallest accepted ``(high - low) / high``.
    The tightest level gap is 0.118 of the span (Fibonacci 0.382 -> 0.5), which
    needs roughly 4e-15 of relative span to stay a few ulps wide; 1e-12 keeps a
    wide margin. Narrower spans collapse adjacent levels at double precision.
    """
