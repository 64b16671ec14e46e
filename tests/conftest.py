import pytest

from invoice_totals.config import get_settings
from invoice_totals.domain.documents import Invoice, LineItem
from invoice_totals.domain.value_objects import Currency


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def usd() -> Currency:
    return Currency("USD", 2)


@pytest.fixture
def gst_line_item() -> LineItem:
    return LineItem(
        quantity=2,
        cost=100,
        tax_name1="GST",
        tax_rate1=10,
        product_key="Consulting",
    )


@pytest.fixture
def sample_invoice(gst_line_item: LineItem) -> Invoice:
    return Invoice(number="INV-0001", line_items=[gst_line_item])


@pytest.fixture
def two_vat_lines() -> list[LineItem]:
    return [
        LineItem(quantity=1, cost=100, tax_name1="VAT", tax_rate1=20),
        LineItem(quantity=1, cost=200, tax_name1="VAT", tax_rate1=20),
    ]


@pytest.fixture
def invoice_payload() -> dict:
    return {
        "document_type": "invoice",
        "number": "INV-0042",
        "discount": 10,
        "tax_name1": "VAT",
        "tax_rate1": 20,
        "line_items": [
            {
                "quantity": 2,
                "cost": "100",
                "tax_name1": "GST",
                "tax_rate1": 10,
                "product_key": "Consulting",
            }
        ],
        "currency": {"code": "USD"},
        "paid_to_date": 0,
    }
