"""Command-line interface for Invoice Totals."""

import argparse
import sys
from decimal import Decimal

from invoice_totals import __version__
from invoice_totals.config import get_settings
from invoice_totals.domain.value_objects import Currency
from invoice_totals.exceptions import InvoiceTotalsError
from invoice_totals.logging_config import LogContext, configure_logging, get_logger
from invoice_totals.schemas import DocumentSchema, TotalsResponse, load_document
from invoice_totals.services.invoice_sum import InvoiceSum

logger = get_logger(__name__)


def resolve_currency(
    schema: DocumentSchema,
    code: str | None = None,
    precision: int | None = None,
) -> Currency:
    """Pick the currency for a document: CLI flags, then payload, then settings."""
    settings = get_settings()
    if code is None and schema.currency is not None:
        code = schema.currency.code
    if precision is None and schema.currency is not None:
        precision = schema.currency.precision
    return Currency.for_code(
        code or settings.default_currency,
        precision,
        default_precision=settings.default_precision,
    )


def _fmt(value: Decimal, precision: int) -> str:
    return f"{value:,.{precision}f}"


def _print_totals(totals: TotalsResponse, precision: int) -> None:
    title = (totals.document_type or "document").replace("_", " ").title()
    if totals.number:
        title = f"{title} {totals.number}"
    print(f"{title} ({totals.currency})")
    print("-" * 50)

    for item in totals.line_items:
        label = item.product_key or "(item)"
        print(
            f"  {label:<20} {item.quantity} x {_fmt(item.cost, precision)}"
            f" = {_fmt(item.line_total, precision)}"
        )
    if totals.line_items:
        print("-" * 50)

    rows = [
        ("Subtotal", totals.sub_total),
        ("Discount", totals.total_discount),
        ("Surcharges", totals.total_custom_values),
        ("Taxes", totals.total_taxes),
        ("Total", totals.amount),
        ("Balance", totals.balance),
        ("Balance due", totals.balance_due),
    ]
    for label, value in rows:
        print(f"  {label + ':':<20} {_fmt(value, precision):>16}")

    if totals.tax_map:
        print()
        print("Tax breakdown:")
        for tax in totals.tax_map:
            print(f"  {tax.name:<20} {_fmt(tax.total, precision):>16}")


def cmd_calculate(args: argparse.Namespace) -> int:
    """Calculate the totals of a JSON document."""
    try:
        schema = load_document(args.file)
        currency = resolve_currency(schema, args.currency, args.precision)
        document = schema.to_domain()

        with LogContext(document_number=document.number or str(document.id)):
            invoice_sum = InvoiceSum(document, currency).build()
        totals = TotalsResponse.from_sum(invoice_sum)

    except InvoiceTotalsError as e:
        logger.warning("calculation_failed", error=e.error_code, **e.context)
        print(f"Error: {e.message}")
        return 1

    if args.format == "json":
        print(totals.model_dump_json(indent=2))
    else:
        _print_totals(totals, currency.decimal_places)
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version."""
    print(f"{get_settings().app_name} {__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="invt",
        description="Invoice Totals - Sales document totals and tax breakdowns",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # calculate command
    calculate_parser = subparsers.add_parser(
        "calculate", help="Calculate the totals of a JSON document"
    )
    calculate_parser.add_argument("file", help="Document JSON file")
    calculate_parser.add_argument(
        "--currency",
        "-c",
        help="ISO currency code (overrides the document's currency)",
        default=None,
    )
    calculate_parser.add_argument(
        "--precision",
        "-p",
        type=int,
        help="Decimal digits for rounding (overrides the currency's precision)",
        default=None,
    )
    calculate_parser.add_argument(
        "--format",
        "-f",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    calculate_parser.set_defaults(func=cmd_calculate)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
