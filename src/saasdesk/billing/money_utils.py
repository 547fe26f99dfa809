"""
Currency handling for plan prices, invoices and notification amounts.

Amounts are stored as ``Decimal`` and only turned into ``Money`` at the
edges, when they are validated against a currency or shown to people.
"""

from decimal import Decimal

from babel import Locale
from babel.core import UnknownLocaleError
from babel.numbers import format_currency
from moneyed import Currency, Money, get_currency
from moneyed.classes import CurrencyDoesNotExist

DEFAULT_LOCALE = "en_US"

Amount = int | float | Decimal | str


class MoneyHandler:
    """Builds and formats ``Money`` for a default currency and locale."""

    def __init__(self, default_currency: str = "USD", default_locale: str = DEFAULT_LOCALE) -> None:
        self.default_currency = self.currency(default_currency)
        self.default_locale = self.locale(default_locale)

    @staticmethod
    def currency(code: str) -> Currency:
        try:
            return get_currency(code.upper())
        except CurrencyDoesNotExist as exc:
            raise ValueError(f"Invalid currency code: {code}") from exc

    @staticmethod
    def locale(code: str | None) -> str:
        """Return ``code`` if Babel knows it, else the default locale."""
        if not code:
            return DEFAULT_LOCALE
        try:
            Locale.parse(code)
        except (UnknownLocaleError, ValueError):
            return DEFAULT_LOCALE
        return code

    def is_valid_currency(self, code: str) -> bool:
        try:
            self.currency(code)
        except ValueError:
            return False
        return True

    def create_money(self, amount: Amount, currency: str | None = None) -> Money:
        # str() first so floats keep their printed value
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        code = currency or self.default_currency.code
        return Money(amount=value, currency=self.currency(code))

    def format_money(self, money: Money, locale: str | None = None) -> str:
        return format_currency(
            money.amount,
            money.currency.code,
            locale=self.locale(locale or self.default_locale),
        )

    def format_amount(self, amount: Amount, currency: str, locale: str | None = None) -> str:
        return self.format_money(self.create_money(amount, currency), locale)


money_handler = MoneyHandler()


def create_money(amount: Amount, currency: str = "USD") -> Money:
    return money_handler.create_money(amount, currency)


def format_amount(amount: Amount, currency: str, locale: str | None = None) -> str:
    """Format an amount for display, e.g. ``format_amount("99.99", "USD") == "$99.99"``."""
    return money_handler.format_amount(amount, currency, locale)


__all__ = [
    "MoneyHandler",
    "money_handler",
    "create_money",
    "format_amount",
]
