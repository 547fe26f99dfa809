"""
Tests for money formatting.
"""

from decimal import Decimal

import pytest

from saasdesk.billing.money_utils import MoneyHandler, create_money, format_amount


class TestMoneyHandler:
    def test_format_amount_us(self):
        assert format_amount(Decimal("99.99"), "USD", "en_US") == "$99.99"

    def test_unknown_locale_falls_back(self):
        assert format_amount(Decimal("29.99"), "USD", "xx_INVALID") == "$29.99"

    def test_invalid_currency(self):
        with pytest.raises(ValueError, match="Invalid currency code"):
            create_money("10", "ZZZ")

    def test_is_valid_currency(self):
        handler = MoneyHandler()

        assert handler.is_valid_currency("eur") is True
        assert handler.is_valid_currency("NOPE") is False

    def test_create_money_from_float_keeps_printed_value(self):
        assert create_money(0.1, "usd").amount == Decimal("0.1")

    def test_format_amount_other_locale(self):
        formatted = format_amount("1234.5", "EUR", "de_DE")

        assert formatted.startswith("1.234,50")
        assert formatted.endswith("€")
