"""Pydantic data models — the validated receipt and its score.

These are the values the scoring engine and the store work with. The
inbound JSON schema lives in ``validation``; nothing here is built from
untrusted input directly.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ReceiptItem(BaseModel):
    """A single line entry on a receipt."""

    model_config = ConfigDict(frozen=True)

    short_description: str
    price: Decimal = Field(ge=0, description="Item price in dollars, two decimal places")


class Receipt(BaseModel):
    """A validated purchase receipt.

    ``total`` is taken as submitted and is never reconciled against the
    item prices.
    """

    model_config = ConfigDict(frozen=True)

    retailer: str
    purchased_at: datetime = Field(description="Local wall-clock purchase time, no timezone")
    items: tuple[ReceiptItem, ...] = Field(min_length=1)
    total: Decimal = Field(ge=0, description="Receipt total in dollars, two decimal places")


class PointsBreakdown(BaseModel):
    """Points contributed by each scoring rule for one receipt."""

    retailer_name: int = Field(0, description="One point per alphanumeric retailer character")
    round_dollar_total: int = Field(0, description="50 points when the total has no cents")
    quarter_multiple_total: int = Field(0, description="25 points when the total is a multiple of 0.25")
    item_pairs: int = Field(0, description="5 points for every two items")
    item_descriptions: int = Field(0, description="Price-based points for descriptions of length divisible by 3")
    odd_purchase_day: int = Field(0, description="6 points when the purchase day is odd")
    afternoon_purchase: int = Field(0, description="10 points between 14:00 and 16:00, exclusive")

    @computed_field
    @property
    def total(self) -> int:
        return (
            self.retailer_name
            + self.round_dollar_total
            + self.quarter_multiple_total
            + self.item_pairs
            + self.item_descriptions
            + self.odd_purchase_day
            + self.afternoon_purchase
        )


class ScoreRecord(BaseModel):
    """A stored score and the id it was filed under."""

    model_config = ConfigDict(frozen=True)

    id: str
    points: int = Field(ge=0)
