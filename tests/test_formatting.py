"""
Unit tests for display formatting.
"""
import math

import pytest

from formatting import format_currency, format_number, format_pct, format_short, format_years


class TestFormatCurrency:
    """Test EUR amount formatting"""

    @pytest.mark.parametrize("value,expected", [
        (1_234_567, "1.23M EUR"),
        (12_500, "12.5k EUR"),
        (1_000, "1.0k EUR"),
        (980, "980 EUR"),
        (999.5, "1000 EUR"),
        (0, "0 EUR"),
        (-2_500, "-2.5k EUR"),
        (-636_980.31, "-637.0k EUR"),
    ])
    def test_values(self, value, expected):
        assert format_currency(value) == expected

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite(self, value):
        assert format_currency(value) == "n/a"


class TestFormatShort:
    """Test abbreviation without currency"""

    def test_values(self):
        assert format_short(1500) == "1.5k"
        assert format_short(2_500_000) == "2.50M"
        assert format_short(42.4) == "42"
        assert format_short(math.nan) == "n/a"


class TestFormatPct:
    """Test percentage formatting"""

    def test_values(self):
        assert format_pct(10) == "10.0%"
        assert format_pct(1.8915279933912639) == "1.9%"
        assert format_pct(35.0) == "35.0%"
        assert format_pct(0.25) == "0.3%"

    def test_non_finite(self):
        assert format_pct(math.inf) == "n/a"


class TestFormatYears:
    """Test month count formatting"""

    @pytest.mark.parametrize("months,expected", [
        (0, "0 mo"), (8, "8 mo"), (11, "11 mo"), (12, "1.0y"),
        (30, "2.5y"), (81, "6.8y"), (176, "14.7y"),
    ])
    def test_values(self, months, expected):
        assert format_years(months) == expected

    def test_never(self):
        assert format_years(math.inf) == "n/a"


class TestFormatNumber:
    """Test plain numbers"""

    def test_values(self):
        assert format_number(5.0) == "5"
        assert format_number(2.5) == "2.5"
