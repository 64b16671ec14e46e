"""Tax breakdown records produced by the totals engine."""

from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple


class TaxKey(NamedTuple):
    """Identity of one tax rate: equal names and numerically equal rates match."""

    name: str
    rate: Decimal


def format_rate(rate: Decimal) -> str:
    """Render a rate without trailing zeros or exponent (``Decimal("10.00")`` -> ``"10"``)."""
    text = format(rate.normalize(), "f")
    return "0" if text in ("-0", "") else text


@dataclass(frozen=True)
class TaxItem:
    key: TaxKey
    name: str
    total: Decimal

    @classmethod
    def for_rate(cls, name: str, rate: Decimal, total: Decimal) -> "TaxItem":
        return cls(
            key=TaxKey(name, rate),
            name=f"{name} {format_rate(rate)} %",
            total=total,
        )


__all__ = ["TaxItem", "TaxKey", "format_rate"]
