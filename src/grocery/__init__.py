"""Grocery list and flyer savings tracking.

Public API:
- GroceryService: Session controller for one user's list and flyers
- GroceryRepository: Database repository for items and flyers
- GroceryItem / GroceryItemDraft: Stored item and validated input
- Flyer / FlyerStatus: Store flyers and their processing state
- PriceMatch / StorePrice: Flyer price matches used for savings
"""

from src.grocery.models import (
    Flyer,
    FlyerStatus,
    GroceryCategory,
    GroceryItem,
    GroceryItemDraft,
    PriceMatch,
    StorePrice,
)
from src.grocery.repository import GroceryRepository
from src.grocery.service import GroceryListSummary, GroceryService

__all__ = [
    "GroceryService",
    "GroceryListSummary",
    "GroceryRepository",
    "GroceryItem",
    "GroceryItemDraft",
    "GroceryCategory",
    "Flyer",
    "FlyerStatus",
    "PriceMatch",
    "StorePrice",
]
