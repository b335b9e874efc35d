"""Report output for breakdown results.

Provides the structured-data (JSON) export, display formatting for dollar
amounts and percentages, and the plain-text summary printed by the CLI.
"""

import json
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .models import BreakdownResult


def _fixed(value: Decimal, places: int) -> str:
    """Format like toFixed: half-up rounding to ``places`` decimals."""
    quantum = Decimal(1).scaleb(-places)
    return f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}"


def format_dollar(amount: Union[int, Decimal]) -> str:
    """Compact dollar display: $0, $850, $12.3K, $4.57M."""
    if amount == 0:
        return "$0"
    if amount < 0:
        return "-" + format_dollar(-amount)

    value = Decimal(amount)
    if value >= 1_000_000:
        return f"${_fixed(value / 1_000_000, 2)}M"
    if value >= 1000:
        return f"${_fixed(value / 1000, 1)}K"
    return f"${_fixed(value, 0)}"


def format_percentage(percentage: Union[float, Decimal], decimals: int = 1) -> str:
    """Format a fraction as a percentage, e.g. 0.125 -> "12.5%"."""
    return f"{_fixed(Decimal(str(percentage)) * 100, decimals)}%"


def export_json(
    result: BreakdownResult,
    exported_at: Optional[datetime] = None,
    indent: Optional[int] = 2,
) -> str:
    """Serialize a breakdown for download.

    The payload mirrors BreakdownResult (camelCase keys) plus an
    ``exportedAt`` UTC timestamp. Pass ``exported_at`` for a reproducible
    export.
    """
    payload = result.model_dump(mode="json", by_alias=True)
    timestamp = exported_at or datetime.now(timezone.utc)
    payload["exportedAt"] = timestamp.isoformat()
    return json.dumps(payload, indent=indent)


class BreakdownReportGenerator:
    """
    Plain-text summary of a breakdown.

    Sections:
    - Headline totals
    - Spending categories with subcategories
    - FICA program areas (if provided)
    - National comparison (if available)
    """

    def __init__(self, include_subcategories: bool = True):
        self.include_subcategories = include_subcategories

    def generate(self, result: BreakdownResult) -> str:
        lines = [
            f"Tax Year {result.year}: Where Your Federal Taxes Went",
            "=" * 60,
            f"Federal income tax:  {format_dollar(result.income_tax)}",
            f"Total tax paid:      {format_dollar(result.total_tax)}",
            "",
            "SPENDING CATEGORIES",
            "-" * 60,
        ]

        for category in result.category_breakdown:
            lines.append(
                f"{category.name:<40} {format_dollar(category.amount):>10} "
                f"{format_percentage(category.percentage):>7}"
            )
            if not self.include_subcategories:
                continue
            for sub in category.subcategories:
                lines.append(
                    f"    {sub.name:<36} {format_dollar(sub.amount):>10} "
                    f"{format_percentage(sub.percentage):>7}"
                )

        if result.fica_breakdown is not None:
            lines += ["", "PAYROLL TAXES (FICA)", "-" * 60]
            programs = (
                ("Social Security", result.fica_breakdown.social_security),
                ("Medicare", result.fica_breakdown.medicare),
            )
            for label, program in programs:
                lines.append(f"{label:<40} {format_dollar(program.total):>10}")
                for entry in program.categories:
                    lines.append(f"    {entry.name:<36} {format_dollar(entry.amount):>10}")

        comparison = result.national_comparison
        if comparison is not None:
            direction = "above" if comparison.difference >= 0 else "below"
            lines += [
                "",
                "NATIONAL COMPARISON",
                "-" * 60,
                f"National average:    {format_dollar(comparison.national_average)}",
                f"Your total is {format_dollar(abs(comparison.difference))} "
                f"({abs(comparison.percent_difference)}%) {direction} average",
            ]
            if comparison.percentile is not None:
                lines.append(f"Estimated percentile: {comparison.percentile}th")

        return "\n".join(lines)


__all__ = [
    "format_dollar",
    "format_percentage",
    "export_json",
    "BreakdownReportGenerator",
]
