"""Currency lookup, conversion and formatting service.

Works on the static currency table loaded at startup. Rates are expressed as
units of a currency per 1 USD; cross-currency conversion goes through USD.
Unknown codes never raise: they fall back to USD or to an identity conversion.
"""

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal, localcontext

from babel import numbers

from ..config import BASE_CURRENCY
from ..models import Conversion, CurrencyInfo

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
DISPLAY_LOCALE = "en_US"
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW"})


class CurrencyService:
    """Read-only access to supported currencies and their USD rates."""

    def __init__(
        self,
        currencies: Mapping[str, CurrencyInfo],
        country_currencies: Mapping[str, str],
    ):
        """Store the reference tables.

        Args:
            currencies: Currency table keyed by ISO 4217 code.
            country_currencies: Default currency code per country code.
        """
        self.currencies = currencies
        self.country_currencies = country_currencies

    def currency_for_country(self, country_code: str) -> CurrencyInfo:
        """Get the default currency for a country.

        Unknown countries use USD. A currency code missing from the table
        also resolves to the USD entry.

        Args:
            country_code: ISO 3166-1 alpha-2 code.

        Returns:
            CurrencyInfo for the country.
        """
        currency_code = self.country_currencies.get(country_code, BASE_CURRENCY)
        currency = self.currencies.get(currency_code)
        if currency is None:
            logger.warning(f"Currency {currency_code} for {country_code} not in table, using USD")
            return self.currencies[BASE_CURRENCY]
        return currency

    def convert(self, amount_usd: Decimal, target_code: str) -> Decimal:
        """Convert a USD amount into the target currency.

        Args:
            amount_usd: Amount in USD.
            target_code: Target currency code.

        Returns:
            Converted amount rounded half-up to cents, or the input amount
            unchanged if the target currency is unknown.
        """
        currency = self.currencies.get(target_code)
        if currency is None:
            logger.debug(f"Unknown target currency {target_code}, amount left unconverted")
            return amount_usd
        with localcontext() as ctx:
            # Quantizing to cents needs every integer digit of the product.
            ctx.prec = max(ctx.prec, amount_usd.adjusted() + currency.rate.adjusted() + 6)
            return (amount_usd * currency.rate).quantize(CENTS, ROUND_HALF_UP)

    def convert_between(self, amount: Decimal, from_code: str, to_code: str) -> Conversion:
        """Convert an amount between two currencies via USD.

        The source amount is first normalized to USD (unknown source codes are
        treated as USD), then converted with :meth:`convert`.

        Args:
            amount: Amount in the source currency.
            from_code: Source currency code.
            to_code: Target currency code.

        Returns:
            Conversion with the original and converted amounts and the target rate.
        """
        from_currency = self.currencies.get(from_code)
        from_rate = from_currency.rate if from_currency else Decimal("1")
        amount_usd = amount / from_rate

        to_currency = self.currencies.get(to_code)
        return Conversion(
            original=amount,
            original_currency=from_code,
            converted=self.convert(amount_usd, to_code),
            target_currency=to_code,
            rate=to_currency.rate if to_currency else Decimal("1"),
        )

    def format_price(self, amount: Decimal, currency_code: str) -> str:
        """Format an amount for display.

        JPY and KRW are shown without fraction digits, everything else with
        two. Unknown codes are formatted as USD without converting the amount.

        Args:
            amount: Amount in the given currency.
            currency_code: Currency code.

        Returns:
            Localized string such as '$1,234.50' or '¥1,235'.
        """
        currency = self.currencies.get(currency_code) or self.currencies[BASE_CURRENCY]
        pattern = "¤#,##0" if currency.code in ZERO_DECIMAL_CURRENCIES else "¤#,##0.00"
        return numbers.format_currency(
            amount,
            currency.code,
            format=pattern,
            locale=DISPLAY_LOCALE,
            currency_digits=False,
        )

    def supported_currencies(self) -> list[CurrencyInfo]:
        """Get all supported currencies in table order."""
        return list(self.currencies.values())
