"""Sales document and line item domain models.

The calculation engine only reads the capability set declared on
:class:`Document`; fields added by the variants are carried for callers and
never consulted by the totals pipeline.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from invoice_totals.domain.value_objects import DocumentType, LineItemType

# Raw numeric input as supplied by callers; sanitized by the engine
Numeric = Decimal | int | float | str | None

_ZERO = Decimal("0")


@dataclass
class LineItem:
    """One priced row of a document.

    ``discount`` is a percentage of the line, or an absolute amount for the
    line when the owning document uses amount discounts. ``line_total``,
    ``tax_amount`` and ``gross_line_total`` are computed.
    """

    quantity: Numeric = Decimal("1")
    cost: Numeric = _ZERO
    discount: Numeric = _ZERO
    tax_name1: str | None = ""
    tax_rate1: Numeric = _ZERO
    tax_name2: str | None = ""
    tax_rate2: Numeric = _ZERO
    tax_name3: str | None = ""
    tax_rate3: Numeric = _ZERO
    type_id: LineItemType = LineItemType.PRODUCT
    product_key: str = ""
    notes: str = ""
    line_total: Decimal = _ZERO
    tax_amount: Decimal = _ZERO
    gross_line_total: Decimal = _ZERO

    def tax_slots(self) -> list[tuple[str, Numeric]]:
        return [
            (self.tax_name1 or "", self.tax_rate1),
            (self.tax_name2 or "", self.tax_rate2),
            (self.tax_name3 or "", self.tax_rate3),
        ]


@dataclass
class Document:
    """Fields shared by every document the totals engine calculates."""

    document_type: ClassVar[DocumentType | None] = None

    line_items: list[LineItem] = field(default_factory=list)
    number: str = ""
    discount: Numeric = _ZERO
    is_amount_discount: bool = False
    tax_name1: str | None = ""
    tax_rate1: Numeric = _ZERO
    tax_name2: str | None = ""
    tax_rate2: Numeric = _ZERO
    tax_name3: str | None = ""
    tax_rate3: Numeric = _ZERO
    custom_surcharge1: Numeric = _ZERO
    custom_surcharge2: Numeric = _ZERO
    custom_surcharge3: Numeric = _ZERO
    custom_surcharge4: Numeric = _ZERO
    custom_surcharge_tax1: bool = False
    custom_surcharge_tax2: bool = False
    custom_surcharge_tax3: bool = False
    custom_surcharge_tax4: bool = False
    paid_to_date: Numeric = _ZERO
    partial: Numeric = _ZERO
    amount: Decimal = _ZERO
    balance: Decimal = _ZERO
    total_taxes: Decimal = _ZERO
    id: UUID = field(default_factory=uuid4)

    def tax_slots(self) -> list[tuple[str, Numeric]]:
        """Return the three document-level (name, rate) pairs."""
        return [
            (self.tax_name1 or "", self.tax_rate1),
            (self.tax_name2 or "", self.tax_rate2),
            (self.tax_name3 or "", self.tax_rate3),
        ]

    def surcharges(self) -> list[tuple[Numeric, bool]]:
        """Return the four (amount, is_taxable) custom surcharges."""
        return [
            (self.custom_surcharge1, bool(self.custom_surcharge_tax1)),
            (self.custom_surcharge2, bool(self.custom_surcharge_tax2)),
            (self.custom_surcharge3, bool(self.custom_surcharge_tax3)),
            (self.custom_surcharge4, bool(self.custom_surcharge_tax4)),
        ]


@dataclass
class Invoice(Document):
    document_type: ClassVar[DocumentType | None] = DocumentType.INVOICE

    client_id: UUID | None = None
    due_date: date | None = None
    partial_due_date: date | None = None


@dataclass
class RecurringInvoice(Document):
    document_type: ClassVar[DocumentType | None] = DocumentType.RECURRING_INVOICE

    client_id: UUID | None = None
    frequency_id: str = "5"
    next_send_date: date | None = None
    remaining_cycles: int = -1


@dataclass
class PurchaseOrder(Document):
    document_type: ClassVar[DocumentType | None] = DocumentType.PURCHASE_ORDER

    vendor_id: UUID | None = None
    due_date: date | None = None


@dataclass
class Credit(Document):
    document_type: ClassVar[DocumentType | None] = DocumentType.CREDIT

    client_id: UUID | None = None
    invoice_id: UUID | None = None


@dataclass
class Quote(Document):
    document_type: ClassVar[DocumentType | None] = DocumentType.QUOTE

    client_id: UUID | None = None
    valid_until: date | None = None


DOCUMENT_CLASSES: dict[DocumentType, type[Document]] = {
    DocumentType.INVOICE: Invoice,
    DocumentType.RECURRING_INVOICE: RecurringInvoice,
    DocumentType.PURCHASE_ORDER: PurchaseOrder,
    DocumentType.CREDIT: Credit,
    DocumentType.QUOTE: Quote,
}


__all__ = [
    "DOCUMENT_CLASSES",
    "Credit",
    "Document",
    "Invoice",
    "LineItem",
    "Numeric",
    "PurchaseOrder",
    "Quote",
    "RecurringInvoice",
]
