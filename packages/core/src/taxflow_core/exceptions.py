"""Custom exceptions for the taxflow application.

This module provides a hierarchy of exception classes for consistent error
handling across the upload -> parse -> calculate pipeline. All exceptions
inherit from TaxFlowError, making it easy to catch all application-specific
errors at the UI boundary.

Every error kind carries a ``user_message``: one actionable sentence that can
be shown to the person who uploaded the return.

Example:
    try:
        parsed = parser.parse(upload)
    except PasswordProtectedError:
        ask_user_to_unlock()
    except TaxFlowError as e:
        logger.warning("upload_rejected", error=e.message)
        show(e.user_message)
"""

from typing import Any, Optional


class TaxFlowError(Exception):
    """Base exception for all taxflow errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the user can retry (all pipeline errors can).
    """

    default_user_message = "Something went wrong. Please try again."

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize TaxFlowError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is recoverable by retrying with
                different input. Defaults to True.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    @property
    def user_message(self) -> str:
        """Actionable message suitable for display."""
        return self.default_user_message

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


# =============================================================================
# UPLOAD / EXTRACTION
# =============================================================================


class ExtractionError(TaxFlowError):
    """Error raised when data cannot be read out of an uploaded return.

    Attributes:
        source: The document name that failed extraction.
        field: The specific field that failed to extract (if applicable).
        document_type: Form type being processed (if known).
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        field: Optional[str] = None,
        document_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.source = source
        self.field = field
        self.document_type = document_type

        if source:
            self.details["source"] = source
        if field:
            self.details["field"] = field
        if document_type:
            self.details["document_type"] = document_type

    @property
    def user_message(self) -> str:
        return self.message


class InvalidFileTypeError(ExtractionError):
    """The uploaded file is not a PDF."""

    def __init__(
        self,
        message: str = "Invalid file type. Please upload a PDF file.",
        *,
        source: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source)
        self.media_type = media_type
        if media_type:
            self.details["media_type"] = media_type


class UnreadableDocumentError(ExtractionError):
    """The PDF could not be opened or its text could not be extracted.

    ``password_protected`` distinguishes a locked file (the user has to
    unlock it) from a corrupt one.
    """

    def __init__(
        self,
        message: str = "Failed to read PDF file. The file may be corrupted or invalid.",
        *,
        source: Optional[str] = None,
        password_protected: bool = False,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, source=source, details=details)
        self.password_protected = password_protected
        self.details["password_protected"] = password_protected


class PasswordProtectedError(UnreadableDocumentError):
    """The PDF is encrypted and cannot be opened without a password."""

    def __init__(
        self,
        message: str = (
            "This PDF is password-protected. Please unlock it first and try again."
        ),
        *,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, password_protected=True)


class UnsupportedFormTypeError(ExtractionError):
    """The document is not a supported Form 1040 variant.

    Raised both for unrecognized documents and for amended returns
    (Form 1040-X), which are recognized but not supported.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        form_type: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        if message is None:
            if form_type == "1040-X":
                message = (
                    "Amended returns (Form 1040-X) are not currently supported. "
                    "Please upload your original Form 1040."
                )
            else:
                message = (
                    "This doesn't appear to be a Form 1040, 1040-SR, or 1040-NR. "
                    "Please upload the correct form."
                )
        super().__init__(message, source=source, document_type=form_type)
        self.form_type = form_type


class YearNotFoundError(ExtractionError):
    """No tax year could be identified in the document text."""

    def __init__(
        self,
        message: str = (
            "Could not identify the tax year from this form. "
            "Please ensure it's a complete Form 1040."
        ),
        *,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, field="year")


class YearOutOfRangeError(ExtractionError):
    """The extracted tax year is outside the supported window."""

    def __init__(
        self,
        year: int,
        *,
        min_year: int,
        max_year: int,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Tax year {year} is not supported. "
            f"This tool supports years {min_year}-{max_year} only.",
            source=source,
            field="year",
            details={"year": year, "min_year": min_year, "max_year": max_year},
        )
        self.year = year
        self.min_year = min_year
        self.max_year = max_year


class AmountNotFoundError(ExtractionError):
    """The total tax amount could not be found by any strategy."""

    def __init__(
        self,
        message: str = (
            "Could not find the federal income tax amount on this form. "
            "Please ensure Line 24 is visible and complete."
        ),
        *,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message, source=source, field="income_tax")


# =============================================================================
# BUDGET DATA
# =============================================================================


class BudgetDataError(TaxFlowError):
    """Base class for failures loading a year's budget table.

    These are load-time failures, distinct from calculation failures.
    """

    def __init__(
        self,
        message: str,
        *,
        year: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.year = year
        if year is not None:
            self.details["year"] = year

    @property
    def user_message(self) -> str:
        return f"Could not load budget data for {self.year}: {self.message}"


class BudgetDataMissingError(BudgetDataError):
    """The budget resource for a year does not exist or cannot be read."""


class BudgetDataInvalidError(BudgetDataError):
    """The budget resource exists but fails structural validation."""

    def __init__(
        self,
        message: str,
        *,
        year: Optional[int] = None,
        errors: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message, year=year)
        self.errors = errors or []
        if self.errors:
            self.details["errors"] = self.errors


# =============================================================================
# CALCULATION / CONFIGURATION
# =============================================================================


class CalculationError(TaxFlowError):
    """Unexpected failure while computing a breakdown.

    Wraps the original exception with the year being calculated.
    """

    def __init__(
        self,
        message: str,
        *,
        year: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(f"Failed to calculate breakdown: {message}", details=details)
        self.year = year
        if year is not None:
            self.details["year"] = year

    @property
    def user_message(self) -> str:
        return self.message


class ConfigurationError(TaxFlowError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details, recoverable=False)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual

    @property
    def user_message(self) -> str:
        return self.message


__all__ = [
    "TaxFlowError",
    "ExtractionError",
    "InvalidFileTypeError",
    "UnreadableDocumentError",
    "PasswordProtectedError",
    "UnsupportedFormTypeError",
    "YearNotFoundError",
    "YearOutOfRangeError",
    "AmountNotFoundError",
    "BudgetDataError",
    "BudgetDataMissingError",
    "BudgetDataInvalidError",
    "CalculationError",
    "ConfigurationError",
]
