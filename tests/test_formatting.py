from decimal import Decimal

import pytest

from plc_capacity.formatting import (
    format_formula,
    format_mb,
    format_number,
    format_percent,
    format_plain,
    round_half_up,
)


class TestRoundHalfUp:

    def test_integer_halves_go_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_exact_binary_value_decides(self):
        # 0.125 is exact in binary, 1.005 is slightly below
        assert round_half_up(0.125, 2) == Decimal("0.13")
        assert round_half_up(1.005, 2) == Decimal("1.00")


class TestFormatters:

    @pytest.mark.parametrize(
        "value, expected",
        [(0, "0"), (999.4, "999"), (1000, "1,000"), (2616716.44, "2,616,716"), (262546.5, "262,547")],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_format_mb(self):
        assert format_mb(2.4954952) == "2.50"
        assert format_mb(0) == "0.00"
        assert format_mb(12.345) == "12.34"

    def test_format_percent_rounds_ties_up(self):
        assert format_percent(0.25) == "0.3"
        assert format_percent(13.4949) == "13.5"
        assert format_percent(100) == "100.0"

    def test_format_plain(self):
        assert format_plain(6.0) == "6"
        assert format_plain(1.5) == "1.5"
        assert format_plain(0) == "0"

    def test_formula(self, default_result):
        assert format_formula(default_result) == "2,616,716 ÷ 1,048,576 = 2.50 Mb"

    def test_values_beyond_default_decimal_precision(self):
        assert format_number(1e25) == "10,000,000,000,000,000,905,969,664"
        assert format_mb(1e25) == "10000000000000000905969664.00"
        assert round_half_up(2.5e40) == Decimal(2.5e40)
