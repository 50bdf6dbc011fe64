"""Tests for the currency service.

Covers:
- Country to currency resolution with USD fallbacks
- USD conversion rounding and unknown-code identity
- Cross-currency conversion through USD
- Display formatting for two- and zero-decimal currencies
"""

import decimal
from decimal import Decimal
from types import MappingProxyType

import pytest

from storefront_geo.models import CurrencyInfo
from storefront_geo.services.currency import CurrencyService


class TestCurrencyForCountry:
    """Test the country to currency fallback chain."""

    def test_known_country(self, currency_service):
        currency = currency_service.currency_for_country("JP")
        assert currency.code == "JPY"
        assert currency.symbol == "¥"

    def test_eurozone_country(self, currency_service):
        for country in ("DE", "FR", "IT", "GR"):
            assert currency_service.currency_for_country(country).code == "EUR"

    def test_unknown_country_falls_back_to_usd(self, currency_service):
        currency = currency_service.currency_for_country("ZZ")
        assert currency.code == "USD"
        assert currency.name == "US Dollar"

    def test_norway_key_is_not_a_yaml_boolean(self, currency_service):
        assert currency_service.currency_for_country("NO").code == "NOK"

    def test_mapped_currency_missing_from_table_falls_back_to_usd(self):
        """A country mapped to a code absent from the table still gets USD."""
        usd = CurrencyInfo(code="USD", symbol="$", name="US Dollar", rate=Decimal("1"))
        service = CurrencyService(
            MappingProxyType({"USD": usd}), MappingProxyType({"XX": "XXX"})
        )

        assert service.currency_for_country("XX") == usd


class TestConvert:
    """Test USD to target currency conversion."""

    def test_usd_to_eur(self, currency_service):
        assert currency_service.convert(Decimal("100"), "EUR") == Decimal("92.00")

    def test_usd_is_identity_rounded_to_cents(self, currency_service):
        assert currency_service.convert(Decimal("19.999"), "USD") == Decimal("20.00")
        assert currency_service.convert(Decimal("10.004"), "USD") == Decimal("10.00")

    def test_rounds_half_up(self, currency_service):
        # 0.125 USD * 1 = 0.125 -> 0.13
        assert currency_service.convert(Decimal("0.125"), "USD") == Decimal("0.13")

    def test_unknown_target_returns_input_unchanged(self, currency_service):
        assert currency_service.convert(Decimal("12.345"), "XYZ") == Decimal("12.345")

    @pytest.mark.parametrize("amount", ["0", "0.01", "1", "49.99", "1234.56", "99999.99"])
    def test_non_negative_and_at_most_two_decimals(self, currency_service, amount):
        for code in currency_service.currencies:
            converted = currency_service.convert(Decimal(amount), code)
            assert converted >= 0
            assert converted == converted.quantize(Decimal("0.01"))

    @pytest.mark.parametrize(
        "amount, code, expected",
        [
            ("1e26", "USD", "100000000000000000000000000.00"),
            ("100000000000000000000000000", "USD", "100000000000000000000000000.00"),
            ("1e30", "EUR", "920000000000000000000000000000.00"),
            ("1e24", "KRW", "1320000000000000000000000000.00"),
        ],
    )
    def test_large_amounts_keep_every_digit(self, currency_service, amount, code, expected):
        precision = decimal.getcontext().prec

        converted = currency_service.convert(Decimal(amount), code)

        assert str(converted) == expected
        assert decimal.getcontext().prec == precision

    @pytest.mark.parametrize("code", ["EUR", "GBP", "CAD", "JPY", "KRW", "AED"])
    def test_round_trip_within_tolerance(self, currency_service, code):
        amount = Decimal("123.45")
        converted = currency_service.convert(amount, code)
        back = currency_service.convert_between(converted, code, "USD").converted

        assert abs(back - amount) <= Decimal("0.01")


class TestConvertBetween:
    """Test cross-currency conversion through USD."""

    def test_usd_to_eur(self, currency_service):
        conversion = currency_service.convert_between(Decimal("100"), "USD", "EUR")

        assert conversion.original == Decimal("100")
        assert conversion.original_currency == "USD"
        assert conversion.converted == Decimal("92.00")
        assert conversion.target_currency == "EUR"
        assert conversion.rate == Decimal("0.92")

    def test_eur_to_gbp_goes_through_usd(self, currency_service):
        conversion = currency_service.convert_between(Decimal("92"), "EUR", "GBP")
        # 92 EUR = 100 USD = 79 GBP
        assert conversion.converted == Decimal("79.00")
        assert conversion.rate == Decimal("0.79")

    def test_unknown_source_treated_as_usd(self, currency_service):
        conversion = currency_service.convert_between(Decimal("10"), "XYZ", "CAD")
        assert conversion.converted == Decimal("13.60")

    def test_unknown_target_keeps_usd_amount_with_rate_one(self, currency_service):
        conversion = currency_service.convert_between(Decimal("92"), "EUR", "XYZ")
        assert conversion.converted == Decimal("100")
        assert conversion.rate == Decimal("1")


class TestFormatPrice:
    """Test locale-aware display formatting."""

    def test_usd(self, currency_service):
        assert currency_service.format_price(Decimal("1234.5"), "USD") == "$1,234.50"

    def test_eur(self, currency_service):
        assert currency_service.format_price(Decimal("9.99"), "EUR") == "€9.99"

    def test_yen_has_no_fraction_digits(self, currency_service):
        assert currency_service.format_price(Decimal("14950.4"), "JPY") == "¥14,950"

    def test_won_has_no_fraction_digits(self, currency_service):
        formatted = currency_service.format_price(Decimal("132000"), "KRW")
        assert formatted.endswith("132,000")
        assert "." not in formatted

    def test_unknown_code_uses_usd_rules_with_literal_amount(self, currency_service):
        assert currency_service.format_price(Decimal("42"), "XYZ") == "$42.00"


def test_supported_currencies_in_table_order(currency_service):
    codes = [currency.code for currency in currency_service.supported_currencies()]

    assert codes[0] == "USD"
    assert len(codes) == 20
    assert {"EUR", "JPY", "KRW", "AED"} <= set(codes)
