"""Tests for InvoiceSum."""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from invoice_totals.domain.documents import (
    Credit,
    Invoice,
    LineItem,
    PurchaseOrder,
    Quote,
    RecurringInvoice,
)
from invoice_totals.domain.taxes import TaxItem, TaxKey
from invoice_totals.domain.value_objects import Currency
from invoice_totals.services.invoice_sum import InvoiceSum, merge_tax_items


def _build(document, currency: Currency | None = None) -> InvoiceSum:
    return InvoiceSum(document, currency or Currency()).build()


class TestInvoiceSumScenarios:
    def test_single_line_with_line_tax(self, sample_invoice: Invoice):
        invoice_sum = _build(sample_invoice)

        assert invoice_sum.sub_total == Decimal("200")
        assert sample_invoice.line_items[0].tax_amount == Decimal("20")
        assert invoice_sum.total == Decimal("220")
        assert sample_invoice.amount == Decimal("220")
        assert sample_invoice.balance == Decimal("220")
        assert sample_invoice.total_taxes == Decimal("20")

    def test_percentage_discount_with_document_tax(self, sample_invoice: Invoice):
        sample_invoice.tax_name1 = "VAT"
        sample_invoice.tax_rate1 = 20
        sample_invoice.discount = 10

        invoice_sum = _build(sample_invoice)

        assert invoice_sum.total_discount == Decimal("20")
        assert invoice_sum.total_taxes == Decimal("56")
        assert invoice_sum.total == Decimal("236")
        assert sample_invoice.amount == Decimal("236")
        tax_map = {item.name: item.total for item in invoice_sum.get_tax_map()}
        assert tax_map == {"GST 10 %": Decimal("20"), "VAT 20 %": Decimal("36")}

    def test_taxable_surcharge_without_line_items(self):
        invoice = Invoice(
            custom_surcharge1=50,
            custom_surcharge_tax1=True,
            tax_name1="VAT",
            tax_rate1=20,
        )

        invoice_sum = _build(invoice)

        assert invoice_sum.total_custom_values == Decimal("50")
        assert invoice_sum.total_taxes == Decimal("10")
        assert invoice.amount == Decimal("60")
        assert invoice_sum.get_tax_map() == [
            TaxItem(TaxKey("VAT", Decimal("20")), "VAT 20 %", Decimal("10.00"))
        ]

    def test_empty_document(self):
        invoice = Invoice(paid_to_date=25)

        invoice_sum = _build(invoice)

        assert invoice_sum.total == Decimal("0")
        assert invoice.amount == Decimal("0")
        assert invoice.balance == Decimal("-25")
        assert invoice_sum.get_tax_map() == []


class TestInvoiceSumInvariants:
    @pytest.fixture
    def busy_invoice(self) -> Invoice:
        return Invoice(
            discount="12.5",
            tax_name1="VAT",
            tax_rate1="19",
            tax_name2="CITY",
            tax_rate2="1.25",
            custom_surcharge1="15.55",
            custom_surcharge_tax1=True,
            custom_surcharge2=4,
            paid_to_date="10.10",
            line_items=[
                LineItem(quantity=3, cost="19.99", tax_name1="GST", tax_rate1=5),
                LineItem(quantity="1.5", cost="7.77", discount=10),
                LineItem(quantity=1, cost="0.33", tax_name1="GST", tax_rate1=5),
            ],
        )

    def test_total_is_sum_of_parts(self, busy_invoice: Invoice):
        invoice_sum = _build(busy_invoice)

        assert invoice_sum.total == (
            invoice_sum.sub_total
            - invoice_sum.total_discount
            + invoice_sum.total_taxes
            + invoice_sum.total_custom_values
        )

    def test_total_taxes_are_rounded_to_precision(self, busy_invoice: Invoice):
        invoice_sum = _build(busy_invoice)

        assert invoice_sum.total_taxes.as_tuple().exponent == -2

    def test_balance_is_amount_less_paid_to_date(self, busy_invoice: Invoice):
        _build(busy_invoice)

        assert busy_invoice.balance == busy_invoice.amount - Decimal("10.10")

    def test_build_is_repeatable(self, busy_invoice: Invoice):
        _build(busy_invoice)
        first = (busy_invoice.amount, busy_invoice.balance, busy_invoice.total_taxes)

        _build(busy_invoice)
        second = (busy_invoice.amount, busy_invoice.balance, busy_invoice.total_taxes)

        assert first == second

    def test_build_returns_self(self, sample_invoice: Invoice):
        invoice_sum = InvoiceSum(sample_invoice, Currency())

        assert invoice_sum.build() is invoice_sum

    def test_state_is_immutable(self, sample_invoice: Invoice):
        invoice_sum = _build(sample_invoice)

        with pytest.raises(FrozenInstanceError):
            invoice_sum.state.total = Decimal("1")  # type: ignore[misc]

    @pytest.mark.parametrize(
        "document_class", [Invoice, RecurringInvoice, PurchaseOrder, Credit, Quote]
    )
    def test_all_document_variants_calculate_alike(
        self, document_class, gst_line_item: LineItem
    ):
        document = document_class(line_items=[gst_line_item], discount=10)

        _build(document)

        assert document.amount == Decimal("200")


class TestInvoiceSumDiscounts:
    def test_taxed_line_discount_modes_differ(self):
        line = LineItem(quantity=1, cost=100, tax_name1="GST", tax_rate1=10)
        by_percent = Invoice(line_items=[line], discount=10)
        by_amount = Invoice(line_items=[line], discount=10, is_amount_discount=True)

        _build(by_percent)
        _build(by_amount)

        # Only an amount discount reduces line taxes
        assert by_percent.amount == Decimal("100")
        assert by_amount.amount == Decimal("99")

    def test_percentage_and_amount_discount_are_equivalent(self):
        by_percent = Invoice(line_items=[LineItem(quantity=1, cost=250)], discount=10)
        by_amount = Invoice(
            line_items=[LineItem(quantity=1, cost=250)],
            discount=25,
            is_amount_discount=True,
        )

        _build(by_percent)
        _build(by_amount)

        assert by_percent.amount == by_amount.amount == Decimal("225")

    def test_percentage_discount_is_rounded(self):
        invoice = Invoice(line_items=[LineItem(quantity=1, cost="199.99")], discount=10)

        invoice_sum = _build(invoice)

        assert invoice_sum.total_discount == Decimal("20.00")
        assert invoice.amount == Decimal("179.99")

    def test_amount_discount_prorates_line_taxes(self, two_vat_lines: list[LineItem]):
        invoice = Invoice(is_amount_discount=True, discount=30, line_items=two_vat_lines)

        invoice_sum = _build(invoice)

        assert invoice_sum.total_discount == Decimal("30")
        assert invoice_sum.total_taxes == Decimal("54")
        assert invoice.amount == Decimal("324")
        assert [line.tax_amount for line in invoice.line_items] == [
            Decimal("18"),
            Decimal("36"),
        ]
        assert [item.total for item in invoice_sum.get_tax_map()] == [Decimal("54")]


class TestInvoiceSumTaxes:
    def test_line_and_document_taxes_with_same_key_merge(
        self, sample_invoice: Invoice
    ):
        sample_invoice.tax_name1 = "GST"
        sample_invoice.tax_rate1 = "10.00"

        invoice_sum = _build(sample_invoice)

        assert invoice_sum.get_tax_map() == [
            TaxItem(TaxKey("GST", Decimal("10")), "GST 10 %", Decimal("40"))
        ]
        assert sample_invoice.amount == Decimal("240")

    def test_distinct_rates_stay_separate(self):
        invoice = Invoice(
            line_items=[
                LineItem(quantity=1, cost=100, tax_name1="GST", tax_rate1=10),
                LineItem(quantity=1, cost=100, tax_name1="GST", tax_rate1=5),
                LineItem(quantity=1, cost=50, tax_name1="GST", tax_rate1=10),
            ]
        )

        invoice_sum = _build(invoice)

        tax_map = invoice_sum.get_tax_map()
        assert [(item.name, item.total) for item in tax_map] == [
            ("GST 10 %", Decimal("15")),
            ("GST 5 %", Decimal("5")),
        ]

    def test_taxable_surcharge_is_taxed_at_each_document_rate(self):
        invoice = Invoice(
            custom_surcharge1=100,
            custom_surcharge_tax1=True,
            tax_name1="VAT",
            tax_rate1=20,
            tax_name2="CITY",
            tax_rate2=5,
        )

        invoice_sum = _build(invoice)

        assert invoice_sum.total_taxes == Decimal("25")
        assert invoice.amount == Decimal("125")

    def test_untaxed_surcharge_adds_no_tax(self):
        invoice = Invoice(custom_surcharge2=40, tax_name1="VAT", tax_rate1=20)

        invoice_sum = _build(invoice)

        assert invoice_sum.total_taxes == Decimal("0")
        assert invoice.amount == Decimal("40")

    def test_document_tax_is_rounded_once(self):
        invoice = Invoice(
            line_items=[LineItem(quantity=1, cost="10.01")],
            tax_name1="GST",
            tax_rate1="7.5",
        )

        invoice_sum = _build(invoice)

        assert invoice_sum.total_taxes == Decimal("0.75")
        assert invoice.amount == Decimal("10.76")

    def test_line_tax_fractions_are_summed_before_rounding(self):
        invoice = Invoice(
            line_items=[
                LineItem(quantity=1, cost="0.07", tax_name1="GST", tax_rate1=5),
                LineItem(quantity=1, cost="0.07", tax_name1="GST", tax_rate1=5),
            ]
        )

        invoice_sum = _build(invoice)

        # 0.0035 rounds to 0.004 per line; the sum 0.008 rounds to 0.01
        assert invoice_sum.total_taxes == Decimal("0.01")


class TestPeppolSurchargeTax:
    def test_borrows_first_line_tax(self):
        invoice = Invoice(
            custom_surcharge1=50,
            custom_surcharge_tax1=True,
            line_items=[LineItem(quantity=1, cost=100, tax_name1="VAT", tax_rate1=21)],
        )

        invoice_sum = _build(invoice)

        assert invoice_sum.get_tax_map() == [
            TaxItem(TaxKey("VAT", Decimal("21")), "VAT 21 %", Decimal("31.50"))
        ]
        # Presentation only: not part of the document's taxes
        assert invoice_sum.total_taxes == Decimal("21")
        assert invoice.amount == Decimal("171")

    def test_uses_all_surcharges(self):
        invoice = Invoice(
            custom_surcharge1=50,
            custom_surcharge_tax1=True,
            custom_surcharge2=50,
            line_items=[LineItem(quantity=1, cost=0, tax_name1="VAT", tax_rate1=10)],
        )

        invoice_sum = _build(invoice)

        assert [item.total for item in invoice_sum.get_tax_map()] == [Decimal("10")]

    def test_skipped_when_document_has_tax(self):
        invoice = Invoice(
            tax_name1="VAT",
            tax_rate1=0,
            custom_surcharge1=50,
            custom_surcharge_tax1=True,
            line_items=[LineItem(quantity=1, cost=100, tax_name1="GST", tax_rate1=10)],
        )

        invoice_sum = _build(invoice)

        names = [item.name for item in invoice_sum.get_tax_map()]
        assert names == ["GST 10 %", "VAT 0 %"]
        gst = invoice_sum.get_tax_map()[0]
        assert gst.total == Decimal("10")

    def test_skipped_when_surcharge_not_taxable(self):
        invoice = Invoice(
            custom_surcharge1=50,
            line_items=[LineItem(quantity=1, cost=100, tax_name1="VAT", tax_rate1=21)],
        )

        invoice_sum = _build(invoice)

        assert [item.total for item in invoice_sum.get_tax_map()] == [Decimal("21")]

    def test_skipped_when_first_line_untaxed(self):
        invoice = Invoice(
            custom_surcharge1=50,
            custom_surcharge_tax1=True,
            line_items=[
                LineItem(quantity=1, cost=100),
                LineItem(quantity=1, cost=100, tax_name1="VAT", tax_rate1=21),
            ],
        )

        invoice_sum = _build(invoice)

        assert [item.total for item in invoice_sum.get_tax_map()] == [Decimal("21")]

    def test_skipped_without_line_items(self):
        invoice = Invoice(custom_surcharge1=50, custom_surcharge_tax1=True)

        invoice_sum = _build(invoice)

        assert invoice_sum.get_tax_map() == []
        assert invoice.amount == Decimal("50")


class TestInvoiceSumPrecision:
    def test_three_digit_currency(self):
        invoice = Invoice(line_items=[LineItem(quantity=1, cost="33.333")], discount=10)

        invoice_sum = _build(invoice, Currency("KWD", 3))

        assert invoice_sum.total_discount == Decimal("3.333")
        assert invoice.amount == Decimal("29.999")

    def test_two_digit_currency_rounds_amount(self):
        invoice = Invoice(line_items=[LineItem(quantity=1, cost="33.333")], discount=10)

        _build(invoice, Currency("USD", 2))

        assert invoice.amount == Decimal("30.00")

    def test_zero_digit_currency(self):
        invoice = Invoice(
            line_items=[LineItem(quantity=1, cost=1000)], tax_name1="VAT", tax_rate1=8
        )

        _build(invoice, Currency("JPY", 0))

        assert invoice.amount == Decimal("1080")
        assert invoice.amount.as_tuple().exponent == 0

    def test_missing_currency_uses_two_digits(self):
        invoice = Invoice(line_items=[LineItem(quantity=1, cost="1.005")])

        InvoiceSum(invoice).build()

        assert invoice.amount == Decimal("1.01")

    def test_missing_precision_uses_two_digits(self):
        invoice = Invoice(line_items=[LineItem(quantity=1, cost="1.005")])

        _build(invoice, Currency("USD", None))

        assert invoice.amount == Decimal("1.01")


class TestInvoiceSumMalformedInput:
    def test_non_finite_values_become_zero(self):
        invoice = Invoice(
            discount=float("nan"),
            tax_name1="VAT",
            tax_rate1=None,
            custom_surcharge1="oops",
            custom_surcharge2=float("inf"),
            paid_to_date=float("inf"),
            line_items=[LineItem(quantity=2, cost=float("nan"))],
        )

        invoice_sum = _build(invoice)

        assert invoice.amount == Decimal("0")
        assert invoice.balance == Decimal("0")
        assert invoice.total_taxes == Decimal("0")
        assert invoice_sum.total_custom_values == Decimal("0")

    def test_credit_with_negative_quantity(self):
        credit = Credit(
            line_items=[LineItem(quantity=-1, cost=50, tax_name1="VAT", tax_rate1=20)]
        )

        _build(credit)

        assert credit.amount == Decimal("-60")
        assert credit.balance == Decimal("-60")

    def test_very_large_amounts_round_without_error(self):
        invoice = Invoice(
            tax_name1="VAT",
            tax_rate1=20,
            line_items=[LineItem(quantity=1, cost=1e30)],
        )

        invoice_sum = _build(invoice)

        assert invoice_sum.total_taxes == Decimal("2E+29")
        assert invoice.amount == Decimal("1.2E+30")

    def test_high_precision_currency(self):
        invoice = Invoice(line_items=[LineItem(quantity=2, cost=100)])

        _build(invoice, Currency("USD", 40))

        assert invoice.amount == Decimal("200")
        assert invoice.amount.as_tuple().exponent == -40


class TestInvoiceSumDocumentUpdates:
    def test_line_items_are_replaced(self, sample_invoice: Invoice):
        original = sample_invoice.line_items

        _build(sample_invoice)

        assert sample_invoice.line_items is not original
        assert sample_invoice.line_items[0].line_total == Decimal("200")
        assert sample_invoice.line_items[0].gross_line_total == Decimal("220")

    def test_paid_to_date_reduces_balance(self, sample_invoice: Invoice):
        sample_invoice.paid_to_date = "100.50"

        _build(sample_invoice)

        assert sample_invoice.amount == Decimal("220")
        assert sample_invoice.balance == Decimal("119.50")


class TestGetBalanceDue:
    def test_partial_below_balance(self):
        invoice = Invoice(partial=30, balance=Decimal("100"))

        assert InvoiceSum(invoice).get_balance_due() == Decimal("30")

    def test_no_partial(self):
        invoice = Invoice(partial=0, balance=Decimal("100"))

        assert InvoiceSum(invoice).get_balance_due() == Decimal("100")

    def test_partial_above_balance(self):
        invoice = Invoice(partial=150, balance=Decimal("100"))

        assert InvoiceSum(invoice).get_balance_due() == Decimal("100")

    def test_after_build(self, sample_invoice: Invoice):
        sample_invoice.partial = 50

        invoice_sum = _build(sample_invoice)

        assert invoice_sum.get_balance_due() == Decimal("50")


class TestMergeTaxItems:
    def test_keeps_first_name_and_order(self):
        items = [
            TaxItem(TaxKey("VAT", Decimal("20")), "VAT 20 %", Decimal("1")),
            TaxItem(TaxKey("GST", Decimal("5")), "GST 5 %", Decimal("2")),
            TaxItem(TaxKey("VAT", Decimal("20.0")), "VAT 20.0 %", Decimal("3")),
        ]

        merged = merge_tax_items(items)

        assert merged == (
            TaxItem(TaxKey("VAT", Decimal("20")), "VAT 20 %", Decimal("4")),
            TaxItem(TaxKey("GST", Decimal("5")), "GST 5 %", Decimal("2")),
        )

    def test_empty(self):
        assert merge_tax_items([]) == ()
