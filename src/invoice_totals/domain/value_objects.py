from dataclasses import dataclass
from enum import Enum

from invoice_totals.exceptions import UnknownCurrencyError

DEFAULT_PRECISION = 2


class CurrencyCode(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"
    CHF = "CHF"
    CAD = "CAD"
    AUD = "AUD"
    CNY = "CNY"
    HKD = "HKD"
    SGD = "SGD"
    NZD = "NZD"
    SEK = "SEK"
    NOK = "NOK"
    DKK = "DKK"
    MXN = "MXN"
    BRL = "BRL"
    INR = "INR"
    KRW = "KRW"
    ZAR = "ZAR"
    BHD = "BHD"
    KWD = "KWD"
    OMR = "OMR"


# ISO 4217 minor units; anything not listed uses DEFAULT_PRECISION
_MINOR_UNITS: dict[CurrencyCode, int] = {
    CurrencyCode.JPY: 0,
    CurrencyCode.KRW: 0,
    CurrencyCode.BHD: 3,
    CurrencyCode.KWD: 3,
    CurrencyCode.OMR: 3,
}


class DocumentType(str, Enum):
    INVOICE = "invoice"
    RECURRING_INVOICE = "recurring_invoice"
    PURCHASE_ORDER = "purchase_order"
    CREDIT = "credit"
    QUOTE = "quote"


class LineItemType(str, Enum):
    PRODUCT = "1"
    TASK = "2"
    UNPAID_FEE = "3"
    PAID_FEE = "4"
    LATE_FEE = "5"
    EXPENSE = "6"
    SHIPPING = "7"


@dataclass(frozen=True, slots=True)
class Currency:
    """Currency settings used for rounding.

    A precision of None falls back to two decimal digits.
    """

    code: str = CurrencyCode.USD.value
    precision: int | None = DEFAULT_PRECISION

    @property
    def decimal_places(self) -> int:
        if self.precision is None or self.precision < 0:
            return DEFAULT_PRECISION
        return self.precision

    @classmethod
    def for_code(
        cls,
        code: str,
        precision: int | None = None,
        default_precision: int = DEFAULT_PRECISION,
    ) -> "Currency":
        """Resolve a supported ISO code, optionally overriding its precision.

        Codes without a registered minor unit use ``default_precision``.
        """
        normalized = code.strip().upper() if code else ""
        try:
            currency_code = CurrencyCode(normalized)
        except ValueError:
            raise UnknownCurrencyError(code) from None
        if precision is None:
            precision = _MINOR_UNITS.get(currency_code, default_precision)
        return cls(currency_code.value, precision)


__all__ = [
    "DEFAULT_PRECISION",
    "Currency",
    "CurrencyCode",
    "DocumentType",
    "LineItemType",
]
