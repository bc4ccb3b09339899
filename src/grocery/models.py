"""Data models for the grocery list and flyer savings tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class GroceryCategory(str, Enum):
    """Aisle category of a grocery item."""

    PRODUCE = "Produce"
    DAIRY = "Dairy"
    MEAT = "Meat"
    BAKERY = "Bakery"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks"

    @classmethod
    def parse(cls, value: str) -> GroceryCategory:
        normalized = value.strip().lower()
        for category in cls:
            if category.value.lower() == normalized:
                return category
        raise ValueError(
            f"Invalid category: {value}. Must be one of "
            f"{', '.join(c.value for c in cls)}"
        )


class FlyerStatus(str, Enum):
    """Processing state of a store flyer."""

    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


@dataclass
class GroceryItem:
    """An entry on a user's grocery list."""

    id: str
    user_id: str
    name: str
    category: GroceryCategory
    quantity: int
    brand: str
    checked: bool
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "category": self.category.value,
            "quantity": self.quantity,
            "brand": self.brand,
            "checked": self.checked,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class Flyer:
    """A weekly-ad flyer the user added for price matching."""

    id: str
    user_id: str
    url: str
    store: str
    status: FlyerStatus
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "url": self.url,
            "store": self.store,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


class GroceryItemDraft(BaseModel):
    """User-submitted fields for a new grocery item."""

    name: str = Field(..., description="Item name")
    category: GroceryCategory = Field(default=GroceryCategory.PRODUCE)
    quantity: int = Field(default=1, ge=1)
    brand: str = Field(default="Any")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @field_validator("brand")
    @classmethod
    def validate_brand(cls, v: str) -> str:
        return v.strip() or "Any"


class StorePrice(BaseModel):
    """Price of one matched item at one store."""

    store: str
    price: float = Field(..., ge=0)
    regular_price: float = Field(..., ge=0)
    savings: float | None = None

    @model_validator(mode="after")
    def default_savings(self) -> StorePrice:
        if self.savings is None:
            self.savings = round(self.regular_price - self.price, 2)
        return self


class PriceMatch(BaseModel):
    """A grocery item matched against flyer prices at several stores."""

    id: str | None = None
    item: str
    stores: list[StorePrice] = Field(..., min_length=1)
