"""Shared fixtures: a small budget table, PDF builders and canned 1040 text."""

import json
from datetime import date
from io import BytesIO
from pathlib import Path

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from taxflow_core.budget import BudgetCache
from taxflow_core.config import TaxFlowSettings
from taxflow_core.form_parser import Form1040Parser
from taxflow_core.pdf_parser import (
    DocumentUpload,
    ExtractedDocument,
    ExtractedText,
    PDFTextExtractor,
    validate_upload,
)

SAMPLE_1040_LINES = [
    "Form 1040 U.S. Individual Income Tax Return 2023",
    "For the year Jan. 1-Dec. 31, 2023, or other tax year beginning",
    "Filing Status Single Married filing jointly Head of household",
    "Your first name and middle initial Last name Your social security number",
    "22 Subtract line 21 from line 18. If zero or less, enter -0- . . . 22 10,305",
    "23 Other taxes, including self-employment tax, from Schedule 2, line 21 . . 23 900",
    "24 Add lines 22 and 23. This is your total tax . . . . . . . . . 24 11,205",
    "25a Form(s) W-2 . . . . . . . . . . 25a 12,000",
]
SAMPLE_1040_TEXT = "\n".join(SAMPLE_1040_LINES)
SAMPLE_INCOME_TAX = 11205

# Pinned clock so the supported-year window does not drift.
TODAY = date(2024, 4, 15)


def budget_data(year: int = 2023) -> dict:
    """A three-category table with FICA shares and national averages."""
    return {
        "year": year,
        "name": f"Test budget {year}",
        "totalBudget": 6_000_000_000_000,
        "allocations": [
            {
                "name": "Defense",
                "percentage": 0.5,
                "color": "#002868",
                "subcategories": [
                    {"name": "Army", "percentage": 0.5},
                    {"name": "Navy", "percentage": 0.5},
                ],
            },
            {
                "name": "Health",
                "percentage": 0.3,
                "subcategories": [
                    {"name": "Medicaid", "percentage": 0.6},
                    {"name": "CHIP", "percentage": 0.4},
                ],
            },
            {"name": "Other", "percentage": 0.2, "subcategories": []},
        ],
        "ficaAllocations": {
            "socialSecurity": [
                {"name": "Retirement", "percentage": 0.7, "subcategories": []},
                {"name": "Disability", "percentage": 0.3, "subcategories": []},
            ],
            "medicare": [
                {"name": "Hospital", "percentage": 0.6, "subcategories": []},
                {"name": "Physician", "percentage": 0.4, "subcategories": []},
            ],
        },
        "nationalAverages": {
            "averageIncomeTax": 10000,
            "averageFICA": 5000,
            "numberOfFilers": 1000,
            "percentileData": {
                "p25": 1000,
                "p50": 5000,
                "p75": 15000,
                "p90": 30000,
                "p95": 50000,
                "p99": 200000,
            },
        },
    }


def write_budget(budget_dir: Path, year: int, data) -> Path:
    path = budget_dir / f"budget-{year}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def build_pdf(pages: list[list[str]], encrypt=None) -> bytes:
    """Render each page's lines top to bottom with reportlab."""
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter, encrypt=encrypt)
    for lines in pages:
        pdf.setFont("Helvetica", 9)
        y = 740
        for line in lines:
            pdf.drawString(40, y, line)
            y -= 16
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


class FakeExtractor(PDFTextExtractor):
    """Returns canned text instead of reading the PDF bytes."""

    def __init__(self, text: str):
        super().__init__()
        self.text = text
        self.calls = 0

    def extract(self, upload: DocumentUpload) -> ExtractedDocument:
        validate_upload(upload)
        self.calls += 1
        return ExtractedDocument(
            filename=upload.filename,
            page_count=1,
            pages=[ExtractedText(text=self.text, page=1)],
        )


@pytest.fixture
def budget_dir(tmp_path: Path) -> Path:
    """Directory holding test tables for 2022 and 2023."""
    directory = tmp_path / "budgets"
    directory.mkdir()
    write_budget(directory, 2022, budget_data(2022))
    write_budget(directory, 2023, budget_data(2023))
    return directory


@pytest.fixture
def cache(budget_dir: Path) -> BudgetCache:
    return BudgetCache(budget_dir)


@pytest.fixture
def settings(budget_dir: Path) -> TaxFlowSettings:
    return TaxFlowSettings(env="test", budget_dir=budget_dir)


@pytest.fixture
def sample_pdf() -> bytes:
    return build_pdf([SAMPLE_1040_LINES, ["Page 2 of Form 1040 (2023)"]])


@pytest.fixture
def sample_upload(sample_pdf: bytes) -> DocumentUpload:
    return DocumentUpload(
        filename="return-2023.pdf",
        content=sample_pdf,
        media_type="application/pdf",
    )


@pytest.fixture
def make_parser(settings: TaxFlowSettings):
    """Factory for a parser that reads canned text."""

    def _make(text: str = SAMPLE_1040_TEXT) -> Form1040Parser:
        return Form1040Parser(settings, text_extractor=FakeExtractor(text), today=lambda: TODAY)

    return _make


def upload_named(filename: str = "return.pdf", media_type: str = "application/pdf") -> DocumentUpload:
    return DocumentUpload(filename=filename, content=b"%PDF-1.4", media_type=media_type)
