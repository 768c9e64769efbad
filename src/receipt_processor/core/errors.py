"""Receipt processing error taxonomy.

Every failure a caller can trigger is one of four kinds: malformed input,
validation failure, unknown receipt id, or a syntactically invalid id.
"""

from __future__ import annotations


class ReceiptError(Exception):
    """Base class for all receipt processing errors."""


class ReceiptRejectedError(ReceiptError, ValueError):
    """A submitted receipt was refused. ``reasons`` lists every failing field."""

    def __init__(self, message: str, reasons: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.reasons = list(reasons or [])

    def __str__(self) -> str:
        if not self.reasons:
            return self.message
        return f"{self.message} ({'; '.join(self.reasons)})"


class MalformedReceiptError(ReceiptRejectedError):
    """The body could not be read as a receipt: bad JSON, wrong types, unknown fields."""


class ReceiptValidationError(ReceiptRejectedError):
    """The body has the right shape but a field breaks a content rule."""


class ReceiptNotFoundError(ReceiptError, LookupError):
    """No score is stored under the requested id."""

    def __init__(self, receipt_id: str):
        super().__init__(f"No receipt found for id {receipt_id!r}")
        self.receipt_id = receipt_id


class InvalidReceiptIdError(ReceiptError, ValueError):
    """The requested id is empty or contains whitespace."""
