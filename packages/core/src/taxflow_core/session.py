"""One user's working state: the parsed upload and the current breakdown.

Calls run one at a time and to completion. A failed upload or calculation
raises and leaves the previous state in place, so the user can simply retry.
"""

from typing import Optional

import structlog

from .budget import BudgetCache
from .calculator import TaxBreakdownCalculator
from .config import TaxFlowSettings
from .form_parser import Form1040Parser, ParsedReturn
from .models import BreakdownResult, FicaContributions, TaxInput
from .pdf_parser import DocumentUpload

logger = structlog.get_logger()


class TaxSession:
    """Holds the state behind a single upload-and-calculate workflow."""

    def __init__(
        self,
        settings: Optional[TaxFlowSettings] = None,
        cache: Optional[BudgetCache] = None,
        parser: Optional[Form1040Parser] = None,
    ):
        self.settings = settings or TaxFlowSettings()
        self.cache = cache if cache is not None else BudgetCache(
            self.settings.resolved_budget_dir
        )
        self.parser = parser or Form1040Parser(self.settings)
        self.calculator = TaxBreakdownCalculator(self.cache)
        self._parsed: Optional[ParsedReturn] = None
        self._result: Optional[BreakdownResult] = None

    @property
    def parsed(self) -> Optional[ParsedReturn]:
        """The last successfully parsed upload."""
        return self._parsed

    @property
    def result(self) -> Optional[BreakdownResult]:
        """The last successful breakdown."""
        return self._result

    def upload(self, upload: DocumentUpload) -> ParsedReturn:
        parsed = self.parser.parse(upload)
        self._parsed = parsed
        return parsed

    def tax_input_from_upload(
        self,
        fica: Optional[FicaContributions] = None,
    ) -> TaxInput:
        """Build a TaxInput from the parsed upload.

        Raises:
            RuntimeError: If nothing has been uploaded yet
        """
        if self._parsed is None:
            raise RuntimeError("No return has been uploaded in this session")
        return TaxInput(
            income_tax=self._parsed.income_tax,
            year=self._parsed.year,
            fica=fica,
        )

    def submit(self, tax_input: TaxInput) -> BreakdownResult:
        """Calculate a breakdown and make it the current result."""
        result = self.calculator.calculate(tax_input)
        self._result = result
        logger.info("breakdown_ready", year=result.year, total_tax=result.total_tax)
        return result

    def reset(self) -> None:
        """Forget the upload and result; cached budget tables are kept."""
        self._parsed = None
        self._result = None


__all__ = ["TaxSession"]
