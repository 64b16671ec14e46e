from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from invoice_totals.domain.documents import Document, LineItem
from invoice_totals.domain.taxes import TaxItem
from invoice_totals.domain.value_objects import Currency
from invoice_totals.logging_config import get_logger
from invoice_totals.services.numbers import (
    ZERO,
    percent_of,
    round_to_precision,
    taxer,
    to_decimal,
)

logger = get_logger(__name__)


class LineItemSum:
    def __init__(self, document: Document, currency: Currency) -> None:
        self._document = document
        self._precision = currency.decimal_places
        self.line_items: list[LineItem] = []
        self.tax_collection: list[tuple[TaxItem, ...]] = []
        self.sub_total = ZERO
        self.gross_sub_total = ZERO
        self.total_taxes = ZERO

    def process(self) -> LineItemSum:
        self.line_items = []
        self.tax_collection = []
        self.sub_total = ZERO
        self.gross_sub_total = ZERO
        self.total_taxes = ZERO

        for item in self._document.line_items or []:
            line_total = self._net_line_total(item)
            item_tax, bundle = self._line_taxes(item, line_total)

            computed = replace(
                item,
                line_total=line_total,
                tax_amount=item_tax,
                gross_line_total=line_total + item_tax,
            )
            self.line_items.append(computed)
            self.tax_collection.append(bundle)
            self.sub_total += line_total
            self.gross_sub_total += computed.gross_line_total
            self.total_taxes += item_tax

        logger.debug(
            "line_items_processed",
            line_count=len(self.line_items),
            sub_total=str(self.sub_total),
            total_taxes=str(self.total_taxes),
        )
        return self

    def calculate_taxes_with_amount_discount(self) -> LineItemSum:
        """Recompute line taxes with a fixed document discount prorated by line.

        Each line bears ``discount * line_total / sub_total`` of the discount
        before its taxes are taken. The subtotal is left as it was.
        """
        discount = to_decimal(self._document.discount)
        self.tax_collection = []
        self.gross_sub_total = ZERO
        self.total_taxes = ZERO

        recomputed: list[LineItem] = []
        for item in self.line_items:
            taxable = item.line_total
            if self.sub_total != ZERO:
                taxable = item.line_total - discount * (item.line_total / self.sub_total)

            item_tax, bundle = self._line_taxes(item, taxable)
            computed = replace(
                item,
                tax_amount=item_tax,
                gross_line_total=item.line_total + item_tax,
            )
            recomputed.append(computed)
            self.tax_collection.append(bundle)
            self.gross_sub_total += computed.gross_line_total
            self.total_taxes += item_tax

        self.line_items = recomputed
        logger.debug(
            "amount_discount_redistributed",
            discount=str(discount),
            sub_total=str(self.sub_total),
            total_taxes=str(self.total_taxes),
        )
        return self

    def _net_line_total(self, item: LineItem) -> Decimal:
        line_total = to_decimal(item.quantity) * to_decimal(item.cost)
        discount = to_decimal(item.discount)
        if discount == ZERO:
            return line_total

        if self._document.is_amount_discount:
            return line_total - round_to_precision(discount, self._precision)
        return line_total - percent_of(line_total, discount, self._precision)

    def _line_taxes(
        self, item: LineItem, amount: Decimal
    ) -> tuple[Decimal, tuple[TaxItem, ...]]:
        item_tax = ZERO
        bundle: list[TaxItem] = []
        for name, raw_rate in item.tax_slots():
            if not name:
                continue
            rate = to_decimal(raw_rate)
            tax = taxer(amount, rate)
            item_tax += tax
            bundle.append(TaxItem.for_rate(name, rate, tax))
        return item_tax, tuple(bundle)


__all__ = ["LineItemSum"]
