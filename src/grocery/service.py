"""Business logic service for the grocery list and flyers."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from src.auth.models import Identity
from src.grocery.flyers import detect_store, validate_flyer_url
from src.grocery.models import Flyer, FlyerStatus, GroceryItem, GroceryItemDraft
from src.grocery.repository import GroceryRepository
from src.utils.store import RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroceryListSummary:
    """Item counts shown above the grocery list."""

    total: int
    checked: int

    @property
    def remaining(self) -> int:
        return self.total - self.checked


class GroceryService:
    """Session controller for one user's grocery list and flyers."""

    def __init__(self, repository: GroceryRepository, identity: Identity):
        self.repository = repository
        self.identity = identity
        self.items: list[GroceryItem] = []
        self.flyers: list[Flyer] = []

    @property
    def owner_id(self) -> str:
        return self.identity.id

    async def refresh(self) -> None:
        """Reload items and flyers from the store."""
        try:
            items = await self.repository.list_items(self.owner_id)
            flyers = await self.repository.list_flyers(self.owner_id)
        except StoreError as e:
            logger.error("Error fetching grocery data: %s", e)
            raise

        self.items = items
        self.flyers = flyers

    def list_summary(self) -> GroceryListSummary:
        return GroceryListSummary(
            total=len(self.items),
            checked=sum(1 for item in self.items if item.checked),
        )

    async def add_item(self, draft: GroceryItemDraft) -> GroceryItem:
        """Append an item to the list."""
        try:
            item = await self.repository.insert_item(self.owner_id, draft)
        except StoreError as e:
            logger.error("Error adding grocery item: %s", e)
            raise

        self.items = [*self.items, item]
        return item

    async def toggle_item(self, item_id: str) -> GroceryItem:
        """Flip the checked flag of an item."""
        current = next((item for item in self.items if item.id == item_id), None)
        if current is None:
            raise RecordNotFoundError(f"Grocery item not found: {item_id}")

        try:
            item = await self.repository.set_checked(
                self.owner_id, item_id, not current.checked
            )
        except StoreError as e:
            logger.error("Error updating grocery item %s: %s", item_id, e)
            raise

        self.items = [item if i.id == item_id else i for i in self.items]
        return item

    async def delete_item(self, item_id: str) -> None:
        """Remove an item from the list."""
        try:
            await self.repository.delete_item(self.owner_id, item_id)
        except StoreError as e:
            logger.error("Error deleting grocery item %s: %s", item_id, e)
            raise

        self.items = [item for item in self.items if item.id != item_id]

    async def add_flyer(self, url: str) -> Flyer:
        """Register a flyer URL; it starts in the processing state.

        Raises:
            ValueError: If the URL is not an http(s) URL.
        """
        flyer_url = validate_flyer_url(url)
        try:
            flyer = await self.repository.insert_flyer(
                self.owner_id, flyer_url, detect_store(flyer_url)
            )
        except StoreError as e:
            logger.error("Error adding flyer: %s", e)
            raise

        self.flyers = [*self.flyers, flyer]
        logger.info("Added %s flyer %s", flyer.store, flyer.id)
        return flyer

    async def mark_flyer(self, flyer_id: str, status: FlyerStatus) -> Flyer:
        """Record the processing outcome of a flyer."""
        try:
            await self.repository.update_flyer_status(self.owner_id, flyer_id, status)
        except StoreError as e:
            logger.error("Error updating flyer %s: %s", flyer_id, e)
            raise

        self.flyers = [
            dataclasses.replace(flyer, status=status) if flyer.id == flyer_id else flyer
            for flyer in self.flyers
        ]
        updated = next((f for f in self.flyers if f.id == flyer_id), None)
        if updated is None:
            await self.refresh()
            updated = next(f for f in self.flyers if f.id == flyer_id)
        return updated

    async def delete_flyer(self, flyer_id: str) -> None:
        """Remove a flyer."""
        try:
            await self.repository.delete_flyer(self.owner_id, flyer_id)
        except StoreError as e:
            logger.error("Error deleting flyer %s: %s", flyer_id, e)
            raise

        self.flyers = [flyer for flyer in self.flyers if flyer.id != flyer_id]
