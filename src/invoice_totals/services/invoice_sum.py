"""Document totals calculation.

:class:`InvoiceSum` runs a fixed pipeline over an immutable
:class:`CalculationState`::

    line items -> discount -> document taxes -> custom values
        -> tax map -> totals -> balance

Each step depends on the output of the one before it. The final state is
written back onto the document (``line_items``, ``amount``, ``balance``,
``total_taxes``).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from decimal import Decimal

from invoice_totals.domain.documents import Document, LineItem
from invoice_totals.domain.taxes import TaxItem, TaxKey
from invoice_totals.domain.value_objects import Currency
from invoice_totals.logging_config import get_logger
from invoice_totals.services.line_item_sum import LineItemSum
from invoice_totals.services.numbers import (
    ZERO,
    cent_round,
    percent_of,
    round_to_precision,
    taxer,
    to_decimal,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class CalculationState:
    line_items: tuple[LineItem, ...] = ()
    sub_total: Decimal = ZERO
    total: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_taxes: Decimal = ZERO
    total_custom_values: Decimal = ZERO
    document_taxes: tuple[TaxItem, ...] = ()
    tax_map: tuple[TaxItem, ...] = ()
    amount: Decimal = ZERO
    balance: Decimal = ZERO


def merge_tax_items(items: Iterable[TaxItem]) -> tuple[TaxItem, ...]:
    names: dict[TaxKey, str] = {}
    totals: dict[TaxKey, Decimal] = {}
    for item in items:
        if item.key not in totals:
            names[item.key] = item.name
            totals[item.key] = ZERO
        totals[item.key] += item.total
    return tuple(TaxItem(key, names[key], total) for key, total in totals.items())


class InvoiceSum:
    """Calculates the totals of a document in place.

    Example:
        invoice_sum = InvoiceSum(invoice, Currency.for_code("EUR")).build()
        invoice.amount, invoice.balance, invoice_sum.get_tax_map()
    """

    def __init__(self, document: Document, currency: Currency | None = None) -> None:
        self.document = document
        self.currency = currency or Currency()
        self._precision = self.currency.decimal_places
        self.line_item_sum = LineItemSum(document, self.currency)
        self._state = CalculationState()

    def build(self) -> InvoiceSum:
        self.line_item_sum = LineItemSum(self.document, self.currency)

        steps: tuple[Callable[[CalculationState], CalculationState], ...] = (
            self._calculate_line_items,
            self._calculate_discount,
            self._calculate_invoice_taxes,
            self._calculate_custom_values,
            self._set_tax_map,
            self._calculate_totals,
            self._calculate_balance,
        )
        state = CalculationState()
        for step in steps:
            state = step(state)

        self._state = state
        self._apply(state)

        logger.debug(
            "document_totals_calculated",
            document_type=getattr(self.document.document_type, "value", None),
            sub_total=str(state.sub_total),
            total_discount=str(state.total_discount),
            total_taxes=str(state.total_taxes),
            total_custom_values=str(state.total_custom_values),
            amount=str(state.amount),
            balance=str(state.balance),
        )
        return self

    def get_tax_map(self) -> list[TaxItem]:
        return list(self._state.tax_map)

    def get_balance_due(self) -> Decimal:
        balance = to_decimal(self.document.balance)
        partial = to_decimal(self.document.partial)
        if partial > ZERO:
            return min(partial, balance)
        return balance

    @property
    def state(self) -> CalculationState:
        return self._state

    @property
    def sub_total(self) -> Decimal:
        return self._state.sub_total

    @property
    def total(self) -> Decimal:
        return self._state.total

    @property
    def total_discount(self) -> Decimal:
        return self._state.total_discount

    @property
    def total_taxes(self) -> Decimal:
        return self._state.total_taxes

    @property
    def total_custom_values(self) -> Decimal:
        return self._state.total_custom_values

    # Pipeline steps

    def _calculate_line_items(self, state: CalculationState) -> CalculationState:
        items = self.line_item_sum.process()
        return replace(
            state,
            line_items=tuple(items.line_items),
            sub_total=items.sub_total,
            total=items.sub_total,
        )

    def _calculate_discount(self, state: CalculationState) -> CalculationState:
        discount = to_decimal(self.document.discount)
        if self.document.is_amount_discount:
            total_discount = discount
        else:
            total_discount = percent_of(state.sub_total, discount, self._precision)
        return replace(
            state,
            total_discount=total_discount,
            total=state.total - total_discount,
        )

    def _calculate_invoice_taxes(self, state: CalculationState) -> CalculationState:
        calculated = ZERO
        contributions: list[TaxItem] = []
        for name, raw_rate in self.document.tax_slots():
            if not name:
                continue
            rate = to_decimal(raw_rate)
            tax = taxer(state.total, rate) + self._surcharge_tax(rate)
            calculated += tax
            contributions.append(TaxItem.for_rate(name, rate, tax))

        return replace(
            state,
            total_taxes=round_to_precision(calculated, self._precision),
            document_taxes=tuple(contributions),
        )

    def _calculate_custom_values(self, state: CalculationState) -> CalculationState:
        custom_values = sum(
            (to_decimal(amount) for amount, _ in self.document.surcharges()), ZERO
        )
        return replace(
            state,
            total_custom_values=custom_values,
            total=state.total + custom_values,
        )

    def _set_tax_map(self, state: CalculationState) -> CalculationState:
        line_items = state.line_items
        if self.document.is_amount_discount:
            self.line_item_sum.calculate_taxes_with_amount_discount()
            line_items = tuple(self.line_item_sum.line_items)

        collected: list[TaxItem] = [
            item for bundle in self.line_item_sum.tax_collection for item in bundle
        ]
        surcharge_tax = self._peppol_surcharge_tax(line_items)
        if surcharge_tax is not None:
            collected.append(surcharge_tax)
        collected.extend(state.document_taxes)

        total_taxes = round_to_precision(
            state.total_taxes + self.line_item_sum.total_taxes, self._precision
        )
        return replace(
            state,
            line_items=line_items,
            tax_map=merge_tax_items(collected),
            total_taxes=total_taxes,
        )

    def _calculate_totals(self, state: CalculationState) -> CalculationState:
        return replace(state, total=state.total + state.total_taxes)

    def _calculate_balance(self, state: CalculationState) -> CalculationState:
        amount = round_to_precision(state.total, self._precision)
        return replace(
            state,
            amount=amount,
            balance=amount - to_decimal(self.document.paid_to_date),
        )

    # Helpers

    def _surcharge_tax(self, rate: Decimal) -> Decimal:
        tax = ZERO
        for amount, is_taxable in self.document.surcharges():
            if is_taxable:
                tax += percent_of(to_decimal(amount), rate, self._precision)
        return tax

    def _peppol_surcharge_tax(self, line_items: tuple[LineItem, ...]) -> TaxItem | None:
        """Tax line shown for taxable surcharges on documents without a tax.

        Peppol e-invoices require surcharges to carry a tax category even when
        the document declares no tax of its own, so the first line item's
        first tax is borrowed. The figure is presentation only and is not
        part of ``total_taxes``.
        """
        if self.document.tax_name1:
            return None
        if not self.document.custom_surcharge_tax1:
            return None
        if to_decimal(self.document.custom_surcharge1) == ZERO or not line_items:
            return None

        first = line_items[0]
        name = first.tax_name1 or ""
        rate = to_decimal(first.tax_rate1)
        amount = sum(
            (to_decimal(value) for value, _ in self.document.surcharges()), ZERO
        )
        if rate <= ZERO or amount == ZERO:
            return None

        logger.debug(
            "surcharge_tax_synthesized",
            tax_name=name,
            rate=str(rate),
            surcharge_total=str(amount),
        )
        return TaxItem.for_rate(name, rate, cent_round(amount * rate / 100))

    def _apply(self, state: CalculationState) -> None:
        self.document.line_items = list(state.line_items)
        self.document.amount = state.amount
        self.document.balance = state.balance
        self.document.total_taxes = state.total_taxes


__all__ = ["CalculationState", "InvoiceSum", "merge_tax_items"]
