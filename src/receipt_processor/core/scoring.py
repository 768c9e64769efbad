"""Receipt points engine.

Pure, deterministic scoring of a validated receipt. Each rule is its own
function so it can be checked in isolation; ``score_receipt`` sums them.
"""

from __future__ import annotations

import math
from datetime import datetime, time
from decimal import Decimal
from fractions import Fraction
from typing import Sequence

from .models import PointsBreakdown, Receipt, ReceiptItem

ROUND_DOLLAR_POINTS = 50
QUARTER_MULTIPLE_POINTS = 25
ITEM_PAIR_POINTS = 5
ODD_DAY_POINTS = 6
AFTERNOON_POINTS = 10

# rules work on exact fractions, never on context-rounded Decimal results
DESCRIPTION_PRICE_MULTIPLIER = Fraction(1, 5)
AFTERNOON_START = time(14, 0)
AFTERNOON_END = time(16, 0)


def score_retailer_name(retailer: str) -> int:
    """One point for every letter or digit in the retailer name."""
    return sum(1 for ch in retailer if ch.isalnum())


def score_round_dollar(total: Decimal) -> int:
    if Fraction(total).denominator == 1:
        return ROUND_DOLLAR_POINTS
    return 0


def score_quarter_multiple(total: Decimal) -> int:
    """25 points if rounding the total to the nearest quarter leaves it unchanged."""
    exact = Fraction(total)
    nearest_quarter = Fraction(round(exact * 4), 4)
    if exact == nearest_quarter:
        return QUARTER_MULTIPLE_POINTS
    return 0


def score_item_pairs(items: Sequence[ReceiptItem]) -> int:
    return ITEM_PAIR_POINTS * (len(items) // 2)


def score_item_description(item: ReceiptItem) -> int:
    """Points for an item whose trimmed description length is divisible by three.

    An all-whitespace description trims to length zero, which counts.
    """
    if len(item.short_description.strip()) % 3 != 0:
        return 0
    return math.ceil(Fraction(item.price) * DESCRIPTION_PRICE_MULTIPLIER)


def score_item_descriptions(items: Sequence[ReceiptItem]) -> int:
    return sum(score_item_description(item) for item in items)


def score_odd_day(purchased_at: datetime) -> int:
    if purchased_at.day % 2 == 1:
        return ODD_DAY_POINTS
    return 0


def score_afternoon_purchase(purchased_at: datetime) -> int:
    """10 points strictly between 14:00 and 16:00."""
    if AFTERNOON_START < purchased_at.time() < AFTERNOON_END:
        return AFTERNOON_POINTS
    return 0


def score_receipt(receipt: Receipt) -> PointsBreakdown:
    """Score every rule for a receipt and return the per-rule breakdown."""
    return PointsBreakdown(
        retailer_name=score_retailer_name(receipt.retailer),
        round_dollar_total=score_round_dollar(receipt.total),
        quarter_multiple_total=score_quarter_multiple(receipt.total),
        item_pairs=score_item_pairs(receipt.items),
        item_descriptions=score_item_descriptions(receipt.items),
        odd_purchase_day=score_odd_day(receipt.purchased_at),
        afternoon_purchase=score_afternoon_purchase(receipt.purchased_at),
    )


def calculate_points(receipt: Receipt) -> int:
    """Total points earned by a receipt."""
    return score_receipt(receipt).total
