"""Database repository for grocery items and flyers."""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from src.grocery.models import (
    Flyer,
    FlyerStatus,
    GroceryCategory,
    GroceryItem,
    GroceryItemDraft,
)
from src.utils.store import RecordNotFoundError, store_errors

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS grocery_items (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category TEXT NOT NULL,
    quantity INTEGER NOT NULL DEFAULT 1,
    brand TEXT NOT NULL DEFAULT 'Any',
    checked INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS flyers (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    url TEXT NOT NULL,
    store TEXT NOT NULL,
    status TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_grocery_items_user_id ON grocery_items(user_id);
CREATE INDEX IF NOT EXISTS idx_flyers_user_id ON flyers(user_id);
"""


class GroceryRepository:
    """Async SQLite repository for grocery list items and flyers.

    Shares the database file with the application tracker; every query is
    scoped by owner.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with store_errors("initialize grocery database"):
            async with self._get_connection() as conn:
                await conn.executescript(CREATE_TABLES_SQL)
                await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def insert_item(self, owner_id: str, draft: GroceryItemDraft) -> GroceryItem:
        """Add an unchecked item to the owner's list."""
        now = datetime.now(UTC)
        item = GroceryItem(
            id=str(uuid.uuid4()),
            user_id=owner_id,
            name=draft.name,
            category=draft.category,
            quantity=draft.quantity,
            brand=draft.brand,
            checked=False,
            created_at=now,
            updated_at=now,
        )

        with store_errors("insert grocery item"):
            async with self._get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO grocery_items (
                        id, user_id, name, category, quantity, brand, checked,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.user_id,
                        item.name,
                        item.category.value,
                        item.quantity,
                        item.brand,
                        0,
                        item.created_at.isoformat(),
                        item.updated_at.isoformat(),
                    ),
                )
                await conn.commit()

        return item

    async def list_items(self, owner_id: str) -> list[GroceryItem]:
        """List the owner's items in the order they were added."""
        with store_errors("list grocery items"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM grocery_items
                    WHERE user_id = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (owner_id,),
                )
                rows = await cursor.fetchall()

        return [self._row_to_item(row) for row in rows]

    async def set_checked(
        self, owner_id: str, item_id: str, checked: bool
    ) -> GroceryItem:
        """Check or uncheck an item.

        Raises:
            RecordNotFoundError: If no such item exists for the owner.
        """
        with store_errors("update grocery item"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    """
                    UPDATE grocery_items SET checked = ?, updated_at = ?
                    WHERE id = ? AND user_id = ?
                    """,
                    (
                        1 if checked else 0,
                        datetime.now(UTC).isoformat(),
                        item_id,
                        owner_id,
                    ),
                )
                await conn.commit()
                updated = cursor.rowcount

                cursor = await conn.execute(
                    "SELECT * FROM grocery_items WHERE id = ? AND user_id = ?",
                    (item_id, owner_id),
                )
                row = await cursor.fetchone()

        if not updated or row is None:
            raise RecordNotFoundError(f"Grocery item not found: {item_id}")
        return self._row_to_item(row)

    async def delete_item(self, owner_id: str, item_id: str) -> None:
        """Remove an item from the owner's list.

        Raises:
            RecordNotFoundError: If no such item exists for the owner.
        """
        with store_errors("delete grocery item"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    "DELETE FROM grocery_items WHERE id = ? AND user_id = ?",
                    (item_id, owner_id),
                )
                await conn.commit()
                deleted = cursor.rowcount

        if not deleted:
            raise RecordNotFoundError(f"Grocery item not found: {item_id}")

    async def insert_flyer(
        self,
        owner_id: str,
        url: str,
        store: str,
        status: FlyerStatus = FlyerStatus.PROCESSING,
    ) -> Flyer:
        """Record a flyer for the owner."""
        flyer = Flyer(
            id=str(uuid.uuid4()),
            user_id=owner_id,
            url=url,
            store=store,
            status=status,
            created_at=datetime.now(UTC),
        )

        with store_errors("insert flyer"):
            async with self._get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO flyers (id, user_id, url, store, status, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        flyer.id,
                        flyer.user_id,
                        flyer.url,
                        flyer.store,
                        flyer.status.value,
                        flyer.created_at.isoformat(),
                    ),
                )
                await conn.commit()

        return flyer

    async def list_flyers(self, owner_id: str) -> list[Flyer]:
        """List the owner's flyers in the order they were added."""
        with store_errors("list flyers"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT * FROM flyers
                    WHERE user_id = ?
                    ORDER BY created_at ASC, rowid ASC
                    """,
                    (owner_id,),
                )
                rows = await cursor.fetchall()

        return [self._row_to_flyer(row) for row in rows]

    async def update_flyer_status(
        self, owner_id: str, flyer_id: str, status: FlyerStatus
    ) -> None:
        """Set the processing status of a flyer.

        Raises:
            RecordNotFoundError: If no such flyer exists for the owner.
        """
        with store_errors("update flyer"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    "UPDATE flyers SET status = ? WHERE id = ? AND user_id = ?",
                    (status.value, flyer_id, owner_id),
                )
                await conn.commit()
                updated = cursor.rowcount

        if not updated:
            raise RecordNotFoundError(f"Flyer not found: {flyer_id}")

    async def delete_flyer(self, owner_id: str, flyer_id: str) -> None:
        """Remove a flyer.

        Raises:
            RecordNotFoundError: If no such flyer exists for the owner.
        """
        with store_errors("delete flyer"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    "DELETE FROM flyers WHERE id = ? AND user_id = ?",
                    (flyer_id, owner_id),
                )
                await conn.commit()
                deleted = cursor.rowcount

        if not deleted:
            raise RecordNotFoundError(f"Flyer not found: {flyer_id}")

    def _row_to_item(self, row: aiosqlite.Row) -> GroceryItem:
        return GroceryItem(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            category=GroceryCategory(row["category"]),
            quantity=int(row["quantity"]),
            brand=row["brand"],
            checked=bool(row["checked"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_flyer(self, row: aiosqlite.Row) -> Flyer:
        return Flyer(
            id=row["id"],
            user_id=row["user_id"],
            url=row["url"],
            store=row["store"],
            status=FlyerStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )
