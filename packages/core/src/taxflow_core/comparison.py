"""Comparison of a taxpayer's total against national averages."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .models import NationalAverages, NationalComparison, PercentileData

# Bucket label -> threshold attribute, lowest bucket first.
PERCENTILE_BUCKETS: tuple[tuple[int, str], ...] = (
    (25, "p25"),
    (50, "p50"),
    (75, "p75"),
    (90, "p90"),
    (95, "p95"),
    (99, "p99"),
)


def estimate_percentile(
    user_total: int,
    percentile_data: Optional[PercentileData],
) -> Optional[int]:
    """Coarse percentile bucket for ``user_total``.

    Returns the first bucket whose threshold is at least ``user_total``;
    totals above the 99th percentile threshold still report 99. Returns
    None when no thresholds are available.
    """
    if percentile_data is None:
        return None

    for bucket, attr in PERCENTILE_BUCKETS:
        if user_total <= getattr(percentile_data, attr):
            return bucket

    return 99  # Top 1%


def percent_difference(user_total: int, national_average: int) -> int:
    """Whole-percent difference from the average; 0 when the average is 0."""
    if national_average == 0:
        return 0
    ratio = Decimal(user_total - national_average) / Decimal(national_average) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compare(
    user_total: int,
    national_averages: Optional[NationalAverages],
    year: Optional[int] = None,
) -> Optional[NationalComparison]:
    """Compare a total tax amount with the national figures for its year.

    Args:
        user_total: Income tax plus FICA paid by the user
        national_averages: The budget table's national statistics, if any
        year: Tax year, carried through to the result

    Returns:
        NationalComparison, or None when the year has no national figures
    """
    if national_averages is None:
        return None

    national_average = (national_averages.average_income_tax or 0) + (
        national_averages.average_fica or 0
    )

    return NationalComparison(
        user_total=user_total,
        national_average=national_average,
        difference=user_total - national_average,
        percent_difference=percent_difference(user_total, national_average),
        percentile=estimate_percentile(user_total, national_averages.percentile_data),
        number_of_filers=national_averages.number_of_filers,
        year=year,
    )


__all__ = [
    "PERCENTILE_BUCKETS",
    "estimate_percentile",
    "percent_difference",
    "compare",
]
