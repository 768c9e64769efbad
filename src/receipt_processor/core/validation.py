"""Receipt submission schema and validation.

An inbound receipt is decoded into ``ReceiptSubmission`` in a single pass:
unknown fields, wrong JSON types and every field rule are checked before any
value is converted. Only a fully valid submission is turned into a ``Receipt``.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from .errors import MalformedReceiptError, ReceiptValidationError
from .models import Receipt, ReceiptItem

logger = logging.getLogger(__name__)

RETAILER_PATTERN = re.compile(r"[\w\s\-&]+", re.ASCII)
DESCRIPTION_PATTERN = re.compile(r"[\w\s\-]+", re.ASCII)
AMOUNT_PATTERN = re.compile(r"\d+\.\d{2}", re.ASCII)
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}", re.ASCII)

INVALID_RECEIPT_MESSAGE = "The receipt is invalid."

# pydantic error types that mean the body is not shaped like a receipt at all
MALFORMED_ERROR_TYPES = frozenset({
    "json_invalid",
    "json_type",
    "extra_forbidden",
    "string_type",
    "list_type",
    "model_type",
    "model_attributes_type",
    "dict_type",
})

Payload = Union[bytes, bytearray, str, Mapping[str, Any], None]


def _check_amount(value: str, field: str) -> str:
    if not AMOUNT_PATTERN.fullmatch(value):
        raise ValueError(f"{field} must be a decimal number with two decimal places")
    return value


def _to_amount(value: str, field: str) -> Decimal:
    """Convert checked amount text, rejecting values beyond the float range."""
    amount = Decimal(value)
    if math.isinf(float(amount)):
        raise ValueError(f"{field} is out of range")
    return amount


class ItemSubmission(BaseModel):
    """One entry of the ``items`` array as submitted."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    short_description: StrictStr = Field(alias="shortDescription")
    price: StrictStr

    @field_validator("short_description")
    @classmethod
    def _short_description(cls, value: str) -> str:
        if value == "":
            raise ValueError("short description is required")
        if not DESCRIPTION_PATTERN.fullmatch(value):
            raise ValueError("short description must contain only alphanumeric characters, spaces, and hyphens")
        return value

    @field_validator("price")
    @classmethod
    def _price(cls, value: str) -> str:
        return _check_amount(value, "price")

    def to_item(self) -> ReceiptItem:
        return ReceiptItem(short_description=self.short_description, price=_to_amount(self.price, "price"))


class ReceiptSubmission(BaseModel):
    """A receipt exactly as submitted over the wire."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    retailer: StrictStr
    purchase_date: StrictStr = Field(alias="purchaseDate", description="YYYY-MM-DD")
    purchase_time: StrictStr = Field(alias="purchaseTime", description="24-hour HH:MM")
    items: list[ItemSubmission]
    total: StrictStr

    @field_validator("retailer")
    @classmethod
    def _retailer(cls, value: str) -> str:
        if value == "":
            raise ValueError("retailer is required")
        if not RETAILER_PATTERN.fullmatch(value):
            raise ValueError("retailer must contain only alphanumeric characters, spaces, hyphens, and ampersands")
        return value

    @field_validator("purchase_date")
    @classmethod
    def _purchase_date(cls, value: str) -> str:
        if value == "":
            raise ValueError("purchase date is required")
        if not DATE_PATTERN.fullmatch(value):
            raise ValueError("purchase date must be formatted as YYYY-MM-DD")
        try:
            date.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"purchase date is not a valid date, {exc}") from exc
        return value

    @field_validator("purchase_time")
    @classmethod
    def _purchase_time(cls, value: str) -> str:
        if value == "":
            raise ValueError("purchase time is required")
        if not TIME_PATTERN.fullmatch(value):
            raise ValueError("purchase time must be formatted as HH:MM")
        try:
            datetime.strptime(value, "%H:%M")
        except ValueError as exc:
            raise ValueError(f"purchase time is not a valid time, {exc}") from exc
        return value

    @field_validator("items")
    @classmethod
    def _items(cls, value: list[ItemSubmission]) -> list[ItemSubmission]:
        if not value:
            raise ValueError("minimum of one item is required")
        return value

    @field_validator("total")
    @classmethod
    def _total(cls, value: str) -> str:
        return _check_amount(value, "total")

    def to_receipt(self) -> Receipt:
        """Convert the checked text fields into a ``Receipt``.

        Raises ReceiptValidationError if a value still fails to convert.
        """
        try:
            purchased_at = datetime.combine(
                date.fromisoformat(self.purchase_date),
                datetime.strptime(self.purchase_time, "%H:%M").time(),
            )
            return Receipt(
                retailer=self.retailer,
                purchased_at=purchased_at,
                items=tuple(item.to_item() for item in self.items),
                total=_to_amount(self.total, "total"),
            )
        except (ValueError, InvalidOperation, ValidationError) as exc:
            logger.info("Receipt failed conversion: %s", exc)
            raise ReceiptValidationError(INVALID_RECEIPT_MESSAGE, [str(exc)]) from exc


def _describe(error: dict) -> str:
    """Render one pydantic error as ``location: message``."""
    location = ".".join(str(part) for part in error.get("loc", ()))
    if error["type"] == "missing":
        message = f"{location.rsplit('.', 1)[-1]} is required"
    elif error["type"] == "value_error" and "error" in error.get("ctx", {}):
        message = str(error["ctx"]["error"])
    else:
        message = error["msg"]
    return f"{location}: {message}" if location else message


def _rejection(exc: ValidationError) -> MalformedReceiptError | ReceiptValidationError:
    errors = exc.errors()
    reasons = [_describe(e) for e in errors]
    if any(e["type"] in MALFORMED_ERROR_TYPES for e in errors):
        return MalformedReceiptError(INVALID_RECEIPT_MESSAGE, reasons)
    return ReceiptValidationError(INVALID_RECEIPT_MESSAGE, reasons)


def validate_submission(payload: Payload) -> ReceiptSubmission:
    """Decode and check a submission without converting it.

    Accepts raw JSON (bytes or str) or an already decoded mapping.
    """
    if payload is None:
        raise MalformedReceiptError("Missing request body.", ["a JSON object representing a receipt is required"])
    try:
        if isinstance(payload, (bytes, bytearray, str)):
            return ReceiptSubmission.model_validate_json(payload)
        if isinstance(payload, Mapping):
            return ReceiptSubmission.model_validate(dict(payload))
    except ValidationError as exc:
        raise _rejection(exc) from exc
    raise MalformedReceiptError(INVALID_RECEIPT_MESSAGE, [f"expected a JSON object, got {type(payload).__name__}"])


def parse_receipt(payload: Payload) -> Receipt:
    """Validate an untrusted payload and build the ``Receipt`` it describes.

    Raises MalformedReceiptError for undecodable or wrongly shaped input and
    ReceiptValidationError when a field breaks a content rule.
    """
    return validate_submission(payload).to_receipt()
