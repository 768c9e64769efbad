"""Receipt processing service: validate, score, store, look up."""

from __future__ import annotations

import logging
import re

from .errors import InvalidReceiptIdError, ReceiptNotFoundError, ReceiptRejectedError
from .models import PointsBreakdown
from .scoring import score_receipt
from .store import ScoreStore
from .validation import Payload, parse_receipt

logger = logging.getLogger(__name__)

RECEIPT_ID_PATTERN = re.compile(r"\S+")


def check_receipt_id(receipt_id: str) -> str:
    """Trim a receipt id and reject it if empty or containing whitespace."""
    receipt_id = receipt_id.strip()
    if not receipt_id:
        raise InvalidReceiptIdError("Receipt ID cannot be empty.")
    if not RECEIPT_ID_PATTERN.fullmatch(receipt_id):
        raise InvalidReceiptIdError("Receipt ID is invalid.")
    return receipt_id


class ReceiptService:
    """Composes validation, scoring and the score store.

    The store is passed in so one instance can be shared by every request
    handler in the process.
    """

    def __init__(self, store: ScoreStore):
        self.store = store

    def preview(self, payload: Payload) -> PointsBreakdown:
        """Validate and score a receipt without storing anything."""
        return score_receipt(parse_receipt(payload))

    def process(self, payload: Payload) -> str:
        """Validate and score a receipt, store the points and return the new id.

        Rejected receipts raise before the store is touched.
        """
        try:
            breakdown = self.preview(payload)
        except ReceiptRejectedError as exc:
            logger.info("Receipt rejected: %s", exc)
            raise
        receipt_id = self.store.put(breakdown.total)
        logger.info("Processed receipt %s for %d points", receipt_id, breakdown.total)
        return receipt_id

    def points(self, receipt_id: str) -> int:
        """Return the points stored for ``receipt_id``.

        Raises InvalidReceiptIdError for a malformed id (the store is not
        consulted) and ReceiptNotFoundError for an unknown one.
        """
        receipt_id = check_receipt_id(receipt_id)
        points = self.store.get(receipt_id)
        if points is None:
            logger.debug("No receipt stored under %s", receipt_id)
            raise ReceiptNotFoundError(receipt_id)
        return points
