from invoice_totals.services.invoice_sum import (
    CalculationState,
    InvoiceSum,
    merge_tax_items,
)
from invoice_totals.services.line_item_sum import LineItemSum
from invoice_totals.services.numbers import (
    cent_round,
    js_round,
    percent_of,
    round_to_precision,
    taxer,
    to_decimal,
)

__all__ = [
    "CalculationState",
    "InvoiceSum",
    "LineItemSum",
    "cent_round",
    "js_round",
    "merge_tax_items",
    "percent_of",
    "round_to_precision",
    "taxer",
    "to_decimal",
]
