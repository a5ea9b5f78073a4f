"""
Tests for human amount parsing and base-unit scaling.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from multiwallet.errors import InvalidAmountError
from multiwallet.providers.base import from_base_units, to_base_units, to_decimal


class TestToBaseUnits:
    def test_bitcoin(self):
        assert to_base_units("0.001", 8) == 100_000
        assert to_base_units("1", 8) == 100_000_000

    def test_smallest_unit(self):
        assert to_base_units(Decimal("0.00000001"), 8) == 1

    def test_token_decimals(self):
        assert to_base_units("1.5", 6) == 1_500_000

    def test_ether_is_exact(self):
        assert to_base_units("123456789.123456789123456789", 18) == (
            123456789_123456789123456789
        )

    def test_extra_digits_truncated(self):
        assert to_base_units("0.123456789", 8) == 12_345_678

    def test_zero_decimals(self):
        assert to_base_units(42, 0) == 42

    def test_surrounding_whitespace(self):
        assert to_base_units(" 2 ", 8) == 200_000_000

    @pytest.mark.parametrize("amount", ["0", "-1", "abc", "", "NaN", "Infinity", "1e"])
    def test_invalid(self, amount):
        with pytest.raises(InvalidAmountError):
            to_base_units(amount, 8)

    def test_below_smallest_unit(self):
        with pytest.raises(InvalidAmountError):
            to_base_units("0.000000001", 8)


class TestToDecimal:
    def test_decimal_passthrough(self):
        assert to_decimal(Decimal("1.25")) == Decimal("1.25")

    def test_int(self):
        assert to_decimal(3) == Decimal(3)


class TestFromBaseUnits:
    def test_display_value(self):
        assert from_base_units(150_000_000, 8) == 1.5
        assert from_base_units(2_500_000, 6) == 2.5
        assert from_base_units(0, 18) == 0.0
