"""Currency formatting for catalog prices."""

from functools import lru_cache
from typing import Dict, NamedTuple, Optional

from price_catalog.config import settings

NBSP = "\u00a0"


class CurrencyFormat(NamedTuple):
    group_separator: str
    symbol: str


# VND has no minor unit, so only the grouping differs per locale
LOCALE_FORMATS: Dict[str, CurrencyFormat] = {
    "vi-VN": CurrencyFormat(group_separator=".", symbol="₫"),
    "en-US": CurrencyFormat(group_separator=",", symbol="₫"),
}
DEFAULT_LOCALE = "vi-VN"


def format_price(price: int, locale: Optional[str] = None) -> str:
    """
    Format a whole-VND price.

    Args:
        price: Amount in VND
        locale: "vi-VN" (default from settings) or "en-US"

    Returns:
        e.g. "1.500.000 ₫" (no-break space before the symbol)
    """
    return _format_price(price, locale or settings.price_locale)


@lru_cache(maxsize=1000)
def _format_price(price: int, locale: str) -> str:
    fmt = LOCALE_FORMATS.get(locale, LOCALE_FORMATS[DEFAULT_LOCALE])
    amount = int(price)
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,}".replace(",", fmt.group_separator)
    return f"{sign}{digits}{NBSP}{fmt.symbol}"
