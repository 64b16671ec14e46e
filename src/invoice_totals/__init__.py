from invoice_totals.domain.documents import (
    Credit,
    Document,
    Invoice,
    LineItem,
    PurchaseOrder,
    Quote,
    RecurringInvoice,
)
from invoice_totals.domain.taxes import TaxItem, TaxKey
from invoice_totals.domain.value_objects import Currency, DocumentType, LineItemType
from invoice_totals.services.invoice_sum import InvoiceSum
from invoice_totals.services.line_item_sum import LineItemSum

__all__ = [
    "Credit",
    "Currency",
    "Document",
    "DocumentType",
    "Invoice",
    "InvoiceSum",
    "LineItem",
    "LineItemSum",
    "LineItemType",
    "PurchaseOrder",
    "Quote",
    "RecurringInvoice",
    "TaxItem",
    "TaxKey",
]

__version__ = "0.1.0"
