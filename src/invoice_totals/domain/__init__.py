from invoice_totals.domain.documents import (
    DOCUMENT_CLASSES,
    Credit,
    Document,
    Invoice,
    LineItem,
    Numeric,
    PurchaseOrder,
    Quote,
    RecurringInvoice,
)
from invoice_totals.domain.taxes import TaxItem, TaxKey, format_rate
from invoice_totals.domain.value_objects import (
    DEFAULT_PRECISION,
    Currency,
    CurrencyCode,
    DocumentType,
    LineItemType,
)

__all__ = [
    "DEFAULT_PRECISION",
    "DOCUMENT_CLASSES",
    "Credit",
    "Currency",
    "CurrencyCode",
    "Document",
    "DocumentType",
    "Invoice",
    "LineItem",
    "LineItemType",
    "Numeric",
    "PurchaseOrder",
    "Quote",
    "RecurringInvoice",
    "TaxItem",
    "TaxKey",
    "format_rate",
]
