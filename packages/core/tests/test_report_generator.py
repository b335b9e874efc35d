"""Tests for formatting, JSON export and the text report."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from taxflow_core import TaxBreakdownCalculator
from taxflow_core.models import FicaContributions
from taxflow_core.report_generator import (
    BreakdownReportGenerator,
    export_json,
    format_dollar,
    format_percentage,
)


@pytest.fixture
def result(cache):
    fica = FicaContributions(social_security=6200, medicare=1450)
    return TaxBreakdownCalculator(cache).calculate_breakdown(10000, 2023, fica=fica)


class TestFormatDollar:
    """Test suite for format_dollar."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            (0, "$0"),
            (850, "$850"),
            (999, "$999"),
            (1000, "$1.0K"),
            (12345, "$12.3K"),
            (12350, "$12.4K"),
            (999_999, "$1000.0K"),
            (1_000_000, "$1.00M"),
            (4_565_000, "$4.57M"),
            (-2500, "-$2.5K"),
            (Decimal("99.5"), "$100"),
        ],
    )
    def test_format(self, amount, expected):
        assert format_dollar(amount) == expected


class TestFormatPercentage:
    """Test suite for format_percentage."""

    def test_default_one_decimal(self):
        assert format_percentage(0.125) == "12.5%"
        assert format_percentage(Decimal("0.11")) == "11.0%"

    def test_decimals(self):
        assert format_percentage(0.12345, decimals=2) == "12.35%"
        assert format_percentage(1, decimals=0) == "100%"


class TestExportJson:
    """Test suite for export_json."""

    def test_camel_case_payload(self, result):
        exported_at = datetime(2024, 4, 15, 12, 0, tzinfo=timezone.utc)
        data = json.loads(export_json(result, exported_at=exported_at))

        assert data["exportedAt"] == "2024-04-15T12:00:00+00:00"
        assert data["incomeTax"] == 10000
        assert data["totalTax"] == 17650
        assert data["categoryBreakdown"][0]["name"] == "Defense"
        assert data["categoryBreakdown"][0]["percentage"] == 0.5
        assert data["ficaBreakdown"]["socialSecurity"]["total"] == 6200
        assert data["nationalComparison"]["percentDifference"] == 18

    def test_reproducible_with_fixed_timestamp(self, result):
        exported_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert export_json(result, exported_at=exported_at) == export_json(
            result, exported_at=exported_at
        )

    def test_compact(self, result):
        assert "\n" not in export_json(result, indent=None)


class TestBreakdownReportGenerator:
    """Test suite for BreakdownReportGenerator."""

    def test_sections(self, result):
        report = BreakdownReportGenerator().generate(result)

        assert report.startswith("Tax Year 2023")
        assert "SPENDING CATEGORIES" in report
        assert "PAYROLL TAXES (FICA)" in report
        assert "NATIONAL COMPARISON" in report
        assert "Estimated percentile: 90th" in report
        assert "Total tax paid:      $17.7K" in report

    def test_subcategories_listed(self, result):
        report = BreakdownReportGenerator().generate(result)
        assert "    Medicaid" in report

    def test_without_subcategories(self, result):
        report = BreakdownReportGenerator(include_subcategories=False).generate(result)
        assert "Medicaid" not in report
        assert "Health" in report

    def test_without_fica(self, cache):
        result = TaxBreakdownCalculator(cache).calculate_breakdown(10000, 2023)
        report = BreakdownReportGenerator().generate(result)

        assert "PAYROLL TAXES" not in report
        assert "below average" in report
