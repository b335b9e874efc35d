"""Tax breakdown calculation: budget table + tax paid -> BreakdownResult."""

from typing import Optional

import structlog

from .allocation import allocate, allocate_fica
from .budget import BudgetCache
from .comparison import compare
from .exceptions import CalculationError, TaxFlowError
from .models import BreakdownResult, FicaContributions, TaxInput

logger = structlog.get_logger()


def calculate_total_tax(income_tax: int, fica: Optional[FicaContributions]) -> int:
    """Income tax plus FICA contributions (none when FICA is absent)."""
    if fica is None:
        return income_tax
    return income_tax + fica.total


class TaxBreakdownCalculator:
    """
    Break a taxpayer's federal tax into spending categories.

    Results are a pure function of the input and the year's budget table;
    the only state is the budget cache, which is read-only after load.
    """

    def __init__(self, cache: Optional[BudgetCache] = None):
        """
        Initialize calculator.

        Args:
            cache: Budget tables to calculate against (default: bundled tables)
        """
        self.cache = cache if cache is not None else BudgetCache()

    def _log_step(self, step: str, **values) -> None:
        logger.info("calculation_step", step=step, **values)

    def calculate(self, tax_input: TaxInput) -> BreakdownResult:
        """
        Calculate the spending breakdown for one taxpayer.

        Args:
            tax_input: Income tax, year and optional FICA contributions

        Returns:
            BreakdownResult whose category amounts sum to the income tax

        Raises:
            BudgetDataMissingError / BudgetDataInvalidError: No usable table
            CalculationError: Anything else that goes wrong
        """
        year = tax_input.year
        budget = self.cache.get(year)

        try:
            total_tax = calculate_total_tax(tax_input.income_tax, tax_input.fica)
            self._log_step(
                "total_tax",
                income_tax=tax_input.income_tax,
                fica=tax_input.fica.total if tax_input.fica else None,
                total_tax=total_tax,
            )

            category_breakdown = allocate(tax_input.income_tax, budget.allocations)
            self._log_step(
                "category_breakdown",
                categories=len(category_breakdown),
                allocated=sum(c.amount for c in category_breakdown),
            )

            fica_breakdown = allocate_fica(tax_input.fica, budget.fica_allocations)
            if fica_breakdown is not None:
                self._log_step("fica_breakdown", total=tax_input.fica.total)

            comparison = compare(total_tax, budget.national_averages, year=year)
            if comparison is not None:
                self._log_step(
                    "national_comparison",
                    national_average=comparison.national_average,
                    percentile=comparison.percentile,
                )

            result = BreakdownResult(
                year=year,
                income_tax=tax_input.income_tax,
                total_tax=total_tax,
                fica=tax_input.fica,
                category_breakdown=tuple(category_breakdown),
                fica_breakdown=fica_breakdown,
                national_comparison=comparison,
                budget_total=budget.total_budget,
            )
        except TaxFlowError:
            raise
        except Exception as e:
            logger.error("calculation_failed", year=year, error=str(e))
            raise CalculationError(str(e), year=year) from e

        return result

    def calculate_breakdown(
        self,
        income_tax: int,
        year: int,
        fica: Optional[FicaContributions] = None,
    ) -> BreakdownResult:
        """Shorthand for ``calculate(TaxInput(...))``."""
        return self.calculate(TaxInput(income_tax=income_tax, year=year, fica=fica))


__all__ = ["TaxBreakdownCalculator", "calculate_total_tax"]
