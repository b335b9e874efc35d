"""Data models for budget tables, tax input and breakdown results.

Budget tables are read from JSON with camelCase keys, so every model here
accepts both the camelCase alias and the snake_case attribute name, and
dumps camelCase when ``by_alias=True``.

Currency amounts are whole dollars (``int``). Percentages are ``Decimal``
fractions so that ``amount * percentage`` rounds exactly; they serialize to
JSON as plain numbers.
"""

from decimal import Decimal
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# Social Security wage base caps employee contributions well below these,
# they only reject obviously mistyped input.
MAX_SOCIAL_SECURITY = 200_000
MAX_MEDICARE = 100_000

Fraction = Annotated[
    Decimal,
    Field(ge=0, le=1),
    PlainSerializer(float, return_type=float, when_used="json"),
]


def _require_number(value: Any) -> Any:
    """Reject strings and booleans that pydantic would otherwise coerce."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValueError("must be a number")
    return value


def _as_fraction(value: Any) -> Any:
    value = _require_number(value)
    if isinstance(value, float):
        # str() keeps 0.15 as 0.15 rather than its binary expansion
        return Decimal(str(value))
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# =============================================================================
# BUDGET DEFINITION
# =============================================================================


class SubAllocation(_CamelModel):
    """A subcategory share, expressed as a fraction of its parent category."""

    name: str = Field(min_length=1)
    percentage: Fraction
    description: Optional[str] = None

    @field_validator("percentage", mode="before")
    @classmethod
    def percentage_is_number(cls, v: Any) -> Any:
        return _as_fraction(v)


class CategoryAllocation(_CamelModel):
    """A top-level spending category in a budget table."""

    name: str = Field(min_length=1)
    percentage: Fraction
    subcategories: list[SubAllocation]
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None

    @field_validator("percentage", mode="before")
    @classmethod
    def percentage_is_number(cls, v: Any) -> Any:
        return _as_fraction(v)

    @field_validator("subcategories")
    @classmethod
    def unique_subcategory_names(cls, v: list[SubAllocation]) -> list[SubAllocation]:
        """Subcategory names must be unique within their category."""
        _ensure_unique(v)
        return v


class FicaAllocations(_CamelModel):
    """Advisory spending shares for payroll contributions."""

    social_security: list[CategoryAllocation] = Field(default_factory=list)
    medicare: list[CategoryAllocation] = Field(default_factory=list)


class PercentileData(_CamelModel):
    """Total-tax thresholds for the national percentile buckets."""

    p25: int
    p50: int
    p75: int
    p90: int
    p95: int
    p99: int

    @model_validator(mode="after")
    def ascending(self) -> "PercentileData":
        thresholds = [self.p25, self.p50, self.p75, self.p90, self.p95, self.p99]
        if thresholds != sorted(thresholds):
            raise ValueError("percentile thresholds must be ascending")
        return self


class NationalAverages(_CamelModel):
    """National statistics used for the comparison panel."""

    average_income_tax: Optional[int] = None
    average_fica: Optional[int] = Field(default=None, alias="averageFICA")
    number_of_filers: Optional[int] = None
    percentile_data: Optional[PercentileData] = None


class BudgetDefinition(_CamelModel):
    """A year's federal spending table.

    Example:
        {
            "year": 2023,
            "totalBudget": 6135000000000,
            "allocations": [
                {"name": "Health", "percentage": 0.25, "subcategories": []}
            ]
        }
    """

    year: Optional[int] = None
    name: Optional[str] = None
    source: Optional[str] = None
    total_budget: int = Field(gt=0)
    allocations: list[CategoryAllocation] = Field(min_length=1)
    fica_allocations: Optional[FicaAllocations] = None
    national_averages: Optional[NationalAverages] = None

    @field_validator("total_budget", mode="before")
    @classmethod
    def total_budget_is_number(cls, v: Any) -> Any:
        return _require_number(v)

    @field_validator("allocations")
    @classmethod
    def unique_category_names(
        cls, v: list[CategoryAllocation]
    ) -> list[CategoryAllocation]:
        """Category names must be unique."""
        _ensure_unique(v)
        return v


def _ensure_unique(items: list[Any]) -> None:
    seen: set[str] = set()
    for item in items:
        if item.name in seen:
            raise ValueError(f"duplicate name: {item.name}")
        seen.add(item.name)


# =============================================================================
# TAX INPUT
# =============================================================================


class FicaContributions(_CamelModel):
    """Social Security and Medicare amounts paid by the taxpayer."""

    social_security: int = Field(default=0, ge=0, le=MAX_SOCIAL_SECURITY)
    medicare: int = Field(default=0, ge=0, le=MAX_MEDICARE)

    @property
    def total(self) -> int:
        return self.social_security + self.medicare


class TaxInput(_CamelModel):
    """What the user submits for a calculation."""

    income_tax: int = Field(ge=0)
    year: int
    fica: Optional[FicaContributions] = None


# =============================================================================
# RESULTS
# =============================================================================


class SubcategoryBreakdown(_FrozenCamelModel):
    name: str
    percentage: Fraction
    amount: int
    description: Optional[str] = None


class CategoryBreakdown(_FrozenCamelModel):
    name: str
    percentage: Fraction
    amount: int
    subcategories: tuple[SubcategoryBreakdown, ...] = ()
    color: Optional[str] = None
    icon: Optional[str] = None


class FicaCategoryBreakdown(_FrozenCamelModel):
    name: str
    percentage: Fraction
    amount: int
    description: Optional[str] = None


class FicaProgramBreakdown(_FrozenCamelModel):
    total: int
    categories: tuple[FicaCategoryBreakdown, ...] = ()


class FicaBreakdown(_FrozenCamelModel):
    social_security: FicaProgramBreakdown
    medicare: FicaProgramBreakdown


class NationalComparison(_FrozenCamelModel):
    user_total: int
    national_average: int
    difference: int
    percent_difference: int
    percentile: Optional[int] = None
    number_of_filers: Optional[int] = None
    year: Optional[int] = None


class BreakdownResult(_FrozenCamelModel):
    """Immutable output of one calculation.

    This is the whole contract the presentation layer consumes.
    """

    year: int
    income_tax: int
    total_tax: int
    fica: Optional[FicaContributions] = None
    category_breakdown: tuple[CategoryBreakdown, ...]
    fica_breakdown: Optional[FicaBreakdown] = None
    national_comparison: Optional[NationalComparison] = None
    budget_total: Optional[int] = None

    @model_validator(mode="after")
    def amounts_partition_income_tax(self) -> "BreakdownResult":
        """Categories sum to the income tax, subcategories to their category."""
        category_sum = sum(c.amount for c in self.category_breakdown)
        if category_sum != self.income_tax:
            raise ValueError(
                f"category amounts sum to {category_sum}, expected {self.income_tax}"
            )
        for category in self.category_breakdown:
            if not category.subcategories:
                continue
            sub_sum = sum(s.amount for s in category.subcategories)
            if sub_sum != category.amount:
                raise ValueError(
                    f"subcategories of {category.name} sum to {sub_sum}, "
                    f"expected {category.amount}"
                )
        return self


__all__ = [
    "MAX_SOCIAL_SECURITY",
    "MAX_MEDICARE",
    "SubAllocation",
    "CategoryAllocation",
    "FicaAllocations",
    "PercentileData",
    "NationalAverages",
    "BudgetDefinition",
    "FicaContributions",
    "TaxInput",
    "SubcategoryBreakdown",
    "CategoryBreakdown",
    "FicaCategoryBreakdown",
    "FicaProgramBreakdown",
    "FicaBreakdown",
    "NationalComparison",
    "BreakdownResult",
]
