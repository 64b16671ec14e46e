"""Decimal helpers shared by the totals engine.

Every operand is sanitized with :func:`to_decimal` before arithmetic so a
missing or non-finite value never reaches a document total.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from invoice_totals.logging_config import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
_HALF = Decimal("0.5")


def to_decimal(value: Any) -> Decimal:
    """Coerce a raw numeric input to a finite Decimal, defaulting to zero."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            logger.debug("non_finite_operand_coerced", value=value)
            return ZERO
    else:
        logger.debug("non_finite_operand_coerced", value=repr(value))
        return ZERO

    if not result.is_finite():
        logger.debug("non_finite_operand_coerced", value=str(value))
        return ZERO
    return result


def round_to_precision(value: Decimal, precision: int) -> Decimal:
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the fraction
        ctx.prec = max(ctx.prec, value.adjusted() + precision + 2)
        return value.quantize(Decimal(1).scaleb(-precision), rounding=ROUND_HALF_UP)


def js_round(value: Decimal) -> Decimal:
    return (value + _HALF).to_integral_value(rounding=ROUND_FLOOR)


def taxer(amount: Decimal, rate: Decimal) -> Decimal:
    """Tax on ``amount`` at ``rate`` percent, kept to a tenth of a cent.

    The result is rounded again to the currency precision once the taxes of
    a document are summed.
    """
    return (js_round(amount * (rate / HUNDRED) * 1000) / 10) / HUNDRED


def cent_round(value: Decimal) -> Decimal:
    return js_round(value * 1000 / 10) / HUNDRED


def percent_of(amount: Decimal, percent: Decimal, precision: int) -> Decimal:
    return round_to_precision(amount * (percent / HUNDRED), precision)


__all__ = [
    "HUNDRED",
    "ZERO",
    "cent_round",
    "js_round",
    "percent_of",
    "round_to_precision",
    "taxer",
    "to_decimal",
]
