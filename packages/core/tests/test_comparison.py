"""Tests for the national comparison."""

import pytest

from taxflow_core.comparison import compare, estimate_percentile, percent_difference
from taxflow_core.models import NationalAverages, PercentileData


@pytest.fixture
def percentiles() -> PercentileData:
    return PercentileData(p25=1000, p50=5000, p75=15000, p90=30000, p95=50000, p99=200000)


class TestEstimatePercentile:
    """Test suite for estimate_percentile."""

    @pytest.mark.parametrize(
        "total,expected",
        [
            (0, 25),
            (1000, 25),
            (1001, 50),
            (15000, 75),
            (15001, 90),
            (50000, 95),
            (200000, 99),
            (250000, 99),
        ],
    )
    def test_buckets(self, percentiles, total: int, expected: int):
        """A total at a threshold belongs to that threshold's bucket."""
        assert estimate_percentile(total, percentiles) == expected

    def test_no_data(self):
        assert estimate_percentile(12345, None) is None


class TestPercentDifference:
    """Test suite for percent_difference."""

    def test_above_average(self):
        assert percent_difference(15000, 10000) == 50

    def test_below_average(self):
        assert percent_difference(5000, 15000) == -67

    def test_halves_round_away_from_zero(self):
        assert percent_difference(201, 200) == 1
        assert percent_difference(199, 200) == -1

    def test_zero_average(self):
        """A zero average is reported as no difference."""
        assert percent_difference(5000, 0) == 0


class TestCompare:
    """Test suite for compare."""

    def test_full_comparison(self, percentiles):
        averages = NationalAverages(
            average_income_tax=10000,
            average_fica=5000,
            number_of_filers=1000,
            percentile_data=percentiles,
        )
        result = compare(20000, averages, year=2023)

        assert result.user_total == 20000
        assert result.national_average == 15000
        assert result.difference == 5000
        assert result.percent_difference == 33
        assert result.percentile == 90
        assert result.number_of_filers == 1000
        assert result.year == 2023

    def test_missing_fica_average(self):
        averages = NationalAverages(average_income_tax=8000)
        result = compare(6000, averages)

        assert result.national_average == 8000
        assert result.difference == -2000
        assert result.percent_difference == -25
        assert result.percentile is None

    def test_no_averages(self):
        assert compare(5000, None) is None

    def test_zero_averages(self):
        """Zero national figures give no difference rather than dividing by zero."""
        averages = NationalAverages(average_income_tax=0, average_fica=0)
        result = compare(4000, averages)

        assert result.national_average == 0
        assert result.percent_difference == 0


class TestPercentileThresholds:
    """Bucketing against a second set of thresholds."""

    @pytest.mark.parametrize("total,expected", [(100, 25), (9000, 50), (100000, 99)])
    def test_buckets(self, total: int, expected: int):
        data = PercentileData(p25=5000, p50=9000, p75=15000, p90=25000, p95=40000, p99=80000)
        assert estimate_percentile(total, data) == expected
