"""Form 1040 upload parsing: file check, text, form type, year and tax."""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import structlog

from .config import TaxFlowSettings
from .exceptions import (
    AmountNotFoundError,
    UnsupportedFormTypeError,
    YearNotFoundError,
    YearOutOfRangeError,
)
from .field_extractor import extract_income_tax, extract_year
from .form_classifier import FormType, classify
from .pdf_parser import DocumentUpload, PDFTextExtractor, validate_upload

logger = structlog.get_logger()


@dataclass(frozen=True)
class ParsedReturn:
    """The two numbers read off a return, plus what kind of return it was."""
    year: int
    income_tax: int
    form_type: FormType
    page_count: int = 0


class Form1040Parser:
    """
    Turns an uploaded Form 1040 PDF into a ParsedReturn.

    Every failure is raised as one descriptive TaxFlowError; nothing is
    guessed when the year or amount cannot be read.
    """

    def __init__(
        self,
        settings: Optional[TaxFlowSettings] = None,
        text_extractor: Optional[PDFTextExtractor] = None,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize the parser.

        Args:
            settings: Year window, page count and amount bound
            text_extractor: PDF text source (default: PDFTextExtractor)
            today: Clock used for the latest supported tax year
        """
        self.settings = settings or TaxFlowSettings()
        self.text_extractor = text_extractor or PDFTextExtractor(
            max_pages=self.settings.max_pages
        )
        self._today = today

    @property
    def supported_years(self) -> range:
        return range(self.settings.min_tax_year, self._today().year + 1)

    def parse(self, upload: DocumentUpload) -> ParsedReturn:
        """
        Parse an uploaded return.

        Args:
            upload: The uploaded file

        Returns:
            ParsedReturn with tax year, total tax and form type

        Raises:
            InvalidFileTypeError: Not a PDF
            UnreadableDocumentError: Corrupt or password-protected PDF
            UnsupportedFormTypeError: Not a 1040 variant, or a 1040-X
            YearNotFoundError / YearOutOfRangeError: Tax year problems
            AmountNotFoundError: Total tax not found
        """
        # Checked before any bytes are handed to the PDF library.
        validate_upload(upload)

        document = self.text_extractor.extract(upload)
        text = document.full_text

        form_type = classify(text)
        if not form_type.is_supported:
            logger.info("unsupported_form", filename=upload.filename, form_type=form_type.value)
            raise UnsupportedFormTypeError(form_type=form_type.value, source=upload.filename)

        year = extract_year(text)
        if year is None:
            raise YearNotFoundError(source=upload.filename)

        years = self.supported_years
        if year not in years:
            raise YearOutOfRangeError(
                year,
                min_year=years.start,
                max_year=years.stop - 1,
                source=upload.filename,
            )

        income_tax = extract_income_tax(text, max_amount=self.settings.max_tax_amount)
        if income_tax is None:
            raise AmountNotFoundError(source=upload.filename)

        logger.info(
            "return_parsed",
            filename=upload.filename,
            form_type=form_type.value,
            year=year,
            income_tax=income_tax,
        )

        return ParsedReturn(
            year=year,
            income_tax=income_tax,
            form_type=form_type,
            page_count=document.page_count,
        )


__all__ = ["ParsedReturn", "Form1040Parser"]
