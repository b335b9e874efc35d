"""Proportional allocation of a dollar total across a budget table.

Every item but the last gets its rounded share of the total; the last item
gets whatever is left. Children therefore always sum exactly to their
parent, and the last-listed item absorbs all rounding error, so list order
in a budget table matters.

The same rule applies to categories (shares of the income tax) and to
subcategories (shares of their category's amount).

FICA tables are advisory rather than an exhaustive partition and are split
without remainder correction; see ``allocate_fica``.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence, Union

import structlog

from .models import (
    CategoryAllocation,
    CategoryBreakdown,
    FicaAllocations,
    FicaBreakdown,
    FicaCategoryBreakdown,
    FicaContributions,
    FicaProgramBreakdown,
    SubAllocation,
    SubcategoryBreakdown,
)

logger = structlog.get_logger()


def round_share(total: int, percentage: Decimal) -> int:
    """``total * percentage`` rounded half-up to whole dollars."""
    share = Decimal(total) * percentage
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_with_remainder(
    total: int,
    items: Sequence[Union[CategoryAllocation, SubAllocation]],
) -> list[int]:
    """Split ``total`` by the items' percentages; the last item takes the rest.

    Args:
        total: Whole-dollar amount to split
        items: Weighted items in table order

    Returns:
        One amount per item, summing exactly to ``total``
    """
    amounts: list[int] = []
    remaining = total
    last_index = len(items) - 1

    for i, item in enumerate(items):
        amount = remaining if i == last_index else round_share(total, item.percentage)
        amounts.append(amount)
        remaining -= amount

    return amounts


def allocate_subcategories(
    category_amount: int,
    subcategories: Sequence[SubAllocation],
) -> list[SubcategoryBreakdown]:
    """Split one category's amount across its subcategories."""
    amounts = split_with_remainder(category_amount, subcategories)
    return [
        SubcategoryBreakdown(
            name=sub.name,
            percentage=sub.percentage,
            amount=amount,
            description=sub.description,
        )
        for sub, amount in zip(subcategories, amounts)
    ]


def allocate(
    total: int,
    allocations: Sequence[CategoryAllocation],
) -> list[CategoryBreakdown]:
    """Split ``total`` across categories, then each category across its
    subcategories.

    Args:
        total: Income tax paid, in whole dollars
        allocations: Budget categories in table order

    Returns:
        Category breakdown entries in table order
    """
    amounts = split_with_remainder(total, allocations)
    breakdown = [
        CategoryBreakdown(
            name=category.name,
            percentage=category.percentage,
            amount=amount,
            subcategories=tuple(allocate_subcategories(amount, category.subcategories)),
            color=category.color,
            icon=category.icon,
        )
        for category, amount in zip(allocations, amounts)
    ]

    if breakdown:
        logger.debug(
            "allocation_complete",
            total=total,
            categories=len(breakdown),
            remainder_sink=breakdown[-1].name,
        )

    return breakdown


def _fica_program(
    total: int,
    categories: Sequence[CategoryAllocation],
) -> FicaProgramBreakdown:
    return FicaProgramBreakdown(
        total=total,
        categories=tuple(
            FicaCategoryBreakdown(
                name=category.name,
                percentage=category.percentage,
                amount=round_share(total, category.percentage),
                description=category.description,
            )
            for category in categories
        ),
    )


def allocate_fica(
    fica: Optional[FicaContributions],
    fica_allocations: Optional[FicaAllocations],
) -> Optional[FicaBreakdown]:
    """Break Social Security and Medicare contributions into program areas.

    Each entry is simply its rounded share; there is no last-item
    correction, so the entries need not sum to the contribution.

    Returns:
        None when either the contributions or the FICA tables are absent
    """
    if fica is None or fica_allocations is None:
        return None

    return FicaBreakdown(
        social_security=_fica_program(fica.social_security, fica_allocations.social_security),
        medicare=_fica_program(fica.medicare, fica_allocations.medicare),
    )


__all__ = [
    "round_share",
    "split_with_remainder",
    "allocate",
    "allocate_subcategories",
    "allocate_fica",
]
