"""Pydantic v2 schemas for document payloads and calculated totals."""

from __future__ import annotations

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from invoice_totals.domain.documents import DOCUMENT_CLASSES, Document, LineItem
from invoice_totals.domain.value_objects import Currency, DocumentType, LineItemType
from invoice_totals.exceptions import DocumentLoadError, InvalidDocumentError
from invoice_totals.services.invoice_sum import InvoiceSum
from invoice_totals.services.numbers import to_decimal

_NUMERIC_LINE_FIELDS = (
    "quantity",
    "cost",
    "discount",
    "tax_rate1",
    "tax_rate2",
    "tax_rate3",
)

_NUMERIC_DOCUMENT_FIELDS = (
    "discount",
    "tax_rate1",
    "tax_rate2",
    "tax_rate3",
    "custom_surcharge1",
    "custom_surcharge2",
    "custom_surcharge3",
    "custom_surcharge4",
    "paid_to_date",
    "partial",
)


# Request Schemas
class CurrencySchema(BaseModel):
    """Schema for the currency settings of a payload."""

    code: str = Field(default="USD", min_length=3, max_length=3)
    precision: int | None = Field(default=None, ge=0, le=6)

    def to_domain(self) -> Currency:
        return Currency.for_code(self.code, self.precision)


class LineItemSchema(BaseModel):
    """Schema for one line item of a document payload."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    quantity: Decimal = Decimal("1")
    cost: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    tax_name1: str = ""
    tax_rate1: Decimal = Decimal("0")
    tax_name2: str = ""
    tax_rate2: Decimal = Decimal("0")
    tax_name3: str = ""
    tax_rate3: Decimal = Decimal("0")
    type_id: LineItemType = LineItemType.PRODUCT
    product_key: str = ""
    notes: str = ""

    @field_validator(*_NUMERIC_LINE_FIELDS, mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("tax_name1", "tax_name2", "tax_name3", mode="before")
    @classmethod
    def coerce_tax_name(cls, v: Any) -> str:
        return v or ""

    def to_domain(self) -> LineItem:
        return LineItem(**self.model_dump())


class DocumentSchema(BaseModel):
    """Schema for a document payload.

    Only the fields the totals engine reads plus the variant fields of each
    document type are accepted; anything else in the payload is ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    document_type: DocumentType = DocumentType.INVOICE
    number: str = ""
    line_items: list[LineItemSchema] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    is_amount_discount: bool = False
    tax_name1: str = ""
    tax_rate1: Decimal = Decimal("0")
    tax_name2: str = ""
    tax_rate2: Decimal = Decimal("0")
    tax_name3: str = ""
    tax_rate3: Decimal = Decimal("0")
    custom_surcharge1: Decimal = Decimal("0")
    custom_surcharge2: Decimal = Decimal("0")
    custom_surcharge3: Decimal = Decimal("0")
    custom_surcharge4: Decimal = Decimal("0")
    custom_surcharge_tax1: bool = False
    custom_surcharge_tax2: bool = False
    custom_surcharge_tax3: bool = False
    custom_surcharge_tax4: bool = False
    paid_to_date: Decimal = Decimal("0")
    partial: Decimal = Decimal("0")

    # Variant fields
    client_id: UUID | None = None
    vendor_id: UUID | None = None
    invoice_id: UUID | None = None
    due_date: date | None = None
    partial_due_date: date | None = None
    valid_until: date | None = None
    next_send_date: date | None = None
    frequency_id: str | None = None
    remaining_cycles: int | None = None

    currency: CurrencySchema | None = None

    @field_validator(*_NUMERIC_DOCUMENT_FIELDS, mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("tax_name1", "tax_name2", "tax_name3", mode="before")
    @classmethod
    def coerce_tax_name(cls, v: Any) -> str:
        return v or ""

    @field_validator("line_items", mode="before")
    @classmethod
    def coerce_line_items(cls, v: Any) -> Any:
        return v or []

    def to_domain(self) -> Document:
        """Build the Document variant named by ``document_type``."""
        document_class = DOCUMENT_CLASSES[self.document_type]
        data = self.model_dump(
            exclude={"document_type", "line_items", "currency"}, exclude_none=True
        )
        accepted = set(document_class.__dataclass_fields__)
        fields = {key: value for key, value in data.items() if key in accepted}
        return document_class(
            line_items=[item.to_domain() for item in self.line_items],
            **fields,
        )


# Response Schemas
class TaxItemResponse(BaseModel):
    """Schema for one tax map entry."""

    name: str
    rate: Decimal
    total: Decimal


class LineItemResponse(BaseModel):
    """Schema for a calculated line item."""

    model_config = ConfigDict(from_attributes=True)

    product_key: str
    quantity: Decimal
    cost: Decimal
    line_total: Decimal
    tax_amount: Decimal
    gross_line_total: Decimal

    @field_validator("quantity", "cost", mode="before")
    @classmethod
    def coerce_numeric(cls, v: Any) -> Decimal:
        return to_decimal(v)


class TotalsResponse(BaseModel):
    """Schema for the totals of a built document."""

    document_type: str | None
    number: str
    currency: str
    sub_total: Decimal
    total_discount: Decimal
    total_taxes: Decimal
    total_custom_values: Decimal
    amount: Decimal
    balance: Decimal
    balance_due: Decimal
    tax_map: list[TaxItemResponse]
    line_items: list[LineItemResponse]

    @classmethod
    def from_sum(cls, invoice_sum: InvoiceSum) -> "TotalsResponse":
        document = invoice_sum.document
        document_type = document.document_type
        return cls(
            document_type=document_type.value if document_type else None,
            number=document.number,
            currency=invoice_sum.currency.code,
            sub_total=invoice_sum.sub_total,
            total_discount=invoice_sum.total_discount,
            total_taxes=invoice_sum.total_taxes,
            total_custom_values=invoice_sum.total_custom_values,
            amount=document.amount,
            balance=document.balance,
            balance_due=invoice_sum.get_balance_due(),
            tax_map=[
                TaxItemResponse(name=item.name, rate=item.key.rate, total=item.total)
                for item in invoice_sum.get_tax_map()
            ],
            line_items=[
                LineItemResponse.model_validate(item) for item in document.line_items
            ],
        )


def parse_document(payload: dict[str, Any]) -> DocumentSchema:
    try:
        return DocumentSchema.model_validate(payload)
    except ValidationError as e:
        raise InvalidDocumentError(e.errors(include_url=False)) from e


def load_document(path: Path | str) -> DocumentSchema:
    """Read and validate a JSON document file."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(path, e.strerror or str(e)) from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DocumentLoadError(path, f"invalid JSON: {e.msg}") from e

    if not isinstance(payload, dict):
        raise DocumentLoadError(path, "expected a JSON object")
    return parse_document(payload)


__all__ = [
    "CurrencySchema",
    "DocumentSchema",
    "LineItemResponse",
    "LineItemSchema",
    "TaxItemResponse",
    "TotalsResponse",
    "load_document",
    "parse_document",
]
