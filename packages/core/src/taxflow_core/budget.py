"""Loading, validation and caching of year-keyed budget tables.

Each tax year has one JSON table named ``budget-<year>.json``. Tables are
read-only once loaded, so a cache keyed by year is enough; the cache is a
plain object owned by whoever runs calculations (a session, a test), never
module state.
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from .config import DEFAULT_BUDGET_DIR
from .exceptions import BudgetDataInvalidError, BudgetDataMissingError
from .models import BudgetDefinition

logger = structlog.get_logger()


def budget_filename(year: int) -> str:
    return f"budget-{year}.json"


def _format_error(error: dict) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "<root>"
    return f"{location}: {error['msg']}"


def parse_budget(data: object, year: int) -> BudgetDefinition:
    """Validate raw JSON data as a budget table.

    Raises:
        BudgetDataInvalidError: If the data fails structural validation
    """
    if not isinstance(data, dict):
        raise BudgetDataInvalidError(f"Invalid budget data format for {year}", year=year)

    try:
        budget = BudgetDefinition.model_validate(data)
    except ValidationError as e:
        errors = [_format_error(err) for err in e.errors()]
        raise BudgetDataInvalidError(
            f"Invalid budget data for {year}: {errors[0]}",
            year=year,
            errors=errors,
        ) from e

    if budget.year is not None and budget.year != year:
        raise BudgetDataInvalidError(
            f"Budget table for {year} is labelled {budget.year}",
            year=year,
        )

    return budget


def load_budget_file(path: Union[str, Path], year: int) -> BudgetDefinition:
    """Read and validate one budget table from disk.

    Raises:
        BudgetDataMissingError: If the file does not exist or cannot be read
        BudgetDataInvalidError: If the file is not a valid JSON budget table
    """
    path = Path(path)

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise BudgetDataMissingError(f"Budget data for {year} not found", year=year) from e
    except UnicodeDecodeError as e:
        raise BudgetDataInvalidError(
            f"Budget data for {year} is not UTF-8 text: {e.reason}", year=year
        ) from e
    except OSError as e:
        raise BudgetDataMissingError(
            f"Budget data for {year} could not be read: {e}", year=year
        ) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BudgetDataInvalidError(
            f"Budget data for {year} is not valid JSON: {e.msg}", year=year
        ) from e

    return parse_budget(data, year)


class BudgetCache:
    """Year-keyed cache of validated budget tables.

    A year is read from disk at most once per cache; failed loads are not
    cached, so a corrected file is picked up on the next request.

    Example:
        cache = BudgetCache()
        budget = cache.get(2023)
        cache.clear()
    """

    def __init__(self, budget_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the cache.

        Args:
            budget_dir: Directory with budget tables (default: bundled tables)
        """
        self.budget_dir = Path(budget_dir) if budget_dir else DEFAULT_BUDGET_DIR
        self._budgets: dict[int, BudgetDefinition] = {}

    def get(self, year: int) -> BudgetDefinition:
        """Return the budget table for ``year``, loading it on first use."""
        budget = self._budgets.get(year)
        if budget is not None:
            return budget

        path = self.budget_dir / budget_filename(year)
        budget = load_budget_file(path, year)
        self._budgets[year] = budget

        logger.info(
            "budget_loaded",
            year=year,
            path=str(path),
            categories=len(budget.allocations),
        )
        return budget

    def available_years(self) -> list[int]:
        """Years that have a table in the budget directory."""
        years = []
        for path in self.budget_dir.glob("budget-*.json"):
            suffix = path.stem.removeprefix("budget-")
            if suffix.isdigit():
                years.append(int(suffix))
        return sorted(years)

    def clear(self) -> None:
        """Drop every cached table."""
        self._budgets.clear()

    def __contains__(self, year: object) -> bool:
        return year in self._budgets

    def __len__(self) -> int:
        return len(self._budgets)


__all__ = [
    "BudgetCache",
    "budget_filename",
    "load_budget_file",
    "parse_budget",
]
