"""Core business logic — validation, scoring, storage and orchestration.

This module is framework-agnostic. It has no dependency on MCP, Starlette,
or any server framework; the server module imports from here.
"""

from .errors import (
    InvalidReceiptIdError,
    MalformedReceiptError,
    ReceiptError,
    ReceiptNotFoundError,
    ReceiptRejectedError,
    ReceiptValidationError,
)
from .models import PointsBreakdown, Receipt, ReceiptItem, ScoreRecord
from .scoring import calculate_points, score_receipt
from .service import ReceiptService, check_receipt_id
from .store import ReadWriteLock, ScoreStore
from .validation import parse_receipt, validate_submission

__all__ = [
    "InvalidReceiptIdError",
    "MalformedReceiptError",
    "PointsBreakdown",
    "ReadWriteLock",
    "Receipt",
    "ReceiptError",
    "ReceiptItem",
    "ReceiptNotFoundError",
    "ReceiptRejectedError",
    "ReceiptService",
    "ReceiptValidationError",
    "ScoreRecord",
    "ScoreStore",
    "calculate_points",
    "check_receipt_id",
    "parse_receipt",
    "score_receipt",
    "validate_submission",
]
