"""Exception hierarchy for Invoice Totals.

All application exceptions inherit from InvoiceTotalsError. The calculation
engine itself never raises for document content: missing or malformed
numbers are treated as zero. These errors belong to the boundary code that
loads documents and resolves currencies.
"""

from pathlib import Path
from typing import Any


class InvoiceTotalsError(Exception):
    """Base exception for all Invoice Totals errors.

    Includes an error_code and extra context for reporting.
    """

    error_code: str = "INVT_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for structured output."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Document Errors
# =============================================================================


class DocumentError(InvoiceTotalsError):
    """Base exception for document-related errors."""

    error_code = "DOCUMENT_ERROR"


class DocumentLoadError(DocumentError):
    """Raised when a document file cannot be read or decoded."""

    error_code = "DOCUMENT_LOAD_ERROR"

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(
            f"Cannot load document {path}: {reason}",
            context={"path": str(path), "reason": reason},
        )


class InvalidDocumentError(DocumentError):
    """Raised when a document payload fails validation."""

    error_code = "INVALID_DOCUMENT"

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        fields = sorted(
            {".".join(str(part) for part in error.get("loc", ())) for error in errors}
        )
        super().__init__(
            f"Invalid document: {len(errors)} validation error(s) in "
            f"{', '.join(fields) or 'payload'}",
            context={"fields": fields},
        )
        self.errors = errors


# =============================================================================
# Currency Errors
# =============================================================================


class CurrencyError(InvoiceTotalsError):
    """Base exception for currency-related errors."""

    error_code = "CURRENCY_ERROR"


class UnknownCurrencyError(CurrencyError):
    """Raised when a currency code is not supported."""

    error_code = "UNKNOWN_CURRENCY"

    def __init__(self, code: str) -> None:
        super().__init__(
            f"Unknown currency: {code}",
            context={"currency": code},
        )


__all__ = [
    "InvoiceTotalsError",
    "DocumentError",
    "DocumentLoadError",
    "InvalidDocumentError",
    "CurrencyError",
    "UnknownCurrencyError",
]
