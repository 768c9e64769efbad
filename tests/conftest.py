"""Shared receipt payloads and service fixtures."""

import copy

import pytest

from receipt_processor.core.service import ReceiptService
from receipt_processor.core.store import ScoreStore

TARGET_RECEIPT = {
    "retailer": "Target",
    "purchaseDate": "2022-01-01",
    "purchaseTime": "13:01",
    "items": [
        {"shortDescription": "Mountain Dew 12PK", "price": "6.49"},
        {"shortDescription": "Emils Cheese Pizza", "price": "12.25"},
        {"shortDescription": "Knorr Creamy Chicken", "price": "1.26"},
        {"shortDescription": "Doritos Nacho Cheese", "price": "3.35"},
        {"shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ", "price": "12.00"},
    ],
    "total": "35.35",
}

CORNER_MARKET_RECEIPT = {
    "retailer": "M&M Corner Market",
    "purchaseDate": "2022-03-20",
    "purchaseTime": "14:33",
    "items": [
        {"shortDescription": "Gatorade", "price": "2.25"},
        {"shortDescription": "Gatorade", "price": "2.25"},
        {"shortDescription": "Gatorade", "price": "2.25"},
        {"shortDescription": "Gatorade", "price": "2.25"},
    ],
    "total": "9.00",
}


@pytest.fixture
def target_receipt() -> dict:
    return copy.deepcopy(TARGET_RECEIPT)


@pytest.fixture
def corner_market_receipt() -> dict:
    return copy.deepcopy(CORNER_MARKET_RECEIPT)


@pytest.fixture
def store() -> ScoreStore:
    return ScoreStore()


@pytest.fixture
def service(store) -> ReceiptService:
    return ReceiptService(store)
