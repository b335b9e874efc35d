"""taxflow core - Form 1040 parsing and federal spending breakdowns."""

__version__ = "0.1.0"

from .budget import BudgetCache
from .calculator import TaxBreakdownCalculator
from .form_classifier import FormType, classify
from .form_parser import Form1040Parser, ParsedReturn
from .models import (
    BreakdownResult,
    BudgetDefinition,
    FicaContributions,
    NationalComparison,
    TaxInput,
)
from .pdf_parser import DocumentUpload, PDFTextExtractor
from .session import TaxSession

__all__ = [
    "BudgetCache",
    "TaxBreakdownCalculator",
    "FormType",
    "classify",
    "Form1040Parser",
    "ParsedReturn",
    "BreakdownResult",
    "BudgetDefinition",
    "FicaContributions",
    "NationalComparison",
    "TaxInput",
    "DocumentUpload",
    "PDFTextExtractor",
    "TaxSession",
]
