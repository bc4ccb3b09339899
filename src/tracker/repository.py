"""Database repository for the Application Tracker.

This module provides async SQLite operations for the ``job_applications``
table. Every statement is scoped by owner, so a user can never read or
modify another user's rows through this class.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.tracker.models import (
    ApplicationDraft,
    ApplicationStatus,
    JobApplication,
)
from src.tracker.pipeline import SortKey
from src.utils.store import RecordNotFoundError, store_errors

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS job_applications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    company TEXT NOT NULL,
    position TEXT NOT NULL,
    location TEXT NOT NULL,
    date_applied TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'Applied',
    salary TEXT,
    notes TEXT,
    job_url TEXT,
    posting_online INTEGER DEFAULT 1,
    hiring_manager TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_job_applications_user_id ON job_applications(user_id);
CREATE INDEX IF NOT EXISTS idx_job_applications_status ON job_applications(status);
"""

# Columns that may be changed through update(); everything else is fixed.
UPDATABLE_COLUMNS = frozenset(
    {
        "company",
        "position",
        "location",
        "date_applied",
        "status",
        "salary",
        "notes",
        "job_url",
        "posting_online",
        "hiring_manager",
    }
)

ORDER_COLUMNS = {
    SortKey.DATE: "date_applied",
    SortKey.COMPANY: "company COLLATE NOCASE",
    SortKey.POSITION: "position COLLATE NOCASE",
    SortKey.STATUS: "status COLLATE NOCASE",
}


def _to_column_value(key: str, value: Any) -> Any:
    if isinstance(value, ApplicationStatus):
        return value.value
    if key == "posting_online":
        return 1 if value else 0
    if key == "date_applied":
        return value.isoformat()
    return value


class ApplicationRepository:
    """Async SQLite repository for job applications.

    Ids are assigned here on insert; callers never choose them.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        with store_errors("initialize tracker database"):
            async with self._get_connection() as conn:
                await conn.execute(CREATE_TABLE_SQL)
                await conn.executescript(CREATE_INDEX_SQL)
                await conn.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def insert(self, owner_id: str, draft: ApplicationDraft) -> JobApplication:
        """Insert a new application for ``owner_id``.

        Args:
            owner_id: Identity the application belongs to.
            draft: Validated user-submitted fields.

        Returns:
            The stored application, with its new id and timestamps.
        """
        now = datetime.now(UTC)
        application = JobApplication(
            id=str(uuid.uuid4()),
            user_id=owner_id,
            company=draft.company,
            position=draft.position,
            location=draft.location,
            date_applied=draft.date_applied,
            status=draft.status,
            created_at=now,
            updated_at=now,
            salary=draft.salary,
            notes=draft.notes,
            job_url=draft.job_url,
            posting_online=draft.posting_online,
            hiring_manager=draft.hiring_manager,
        )

        with store_errors("insert application"):
            async with self._get_connection() as conn:
                await conn.execute(
                    """
                    INSERT INTO job_applications (
                        id, user_id, company, position, location, date_applied,
                        status, salary, notes, job_url, posting_online,
                        hiring_manager, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        application.id,
                        application.user_id,
                        application.company,
                        application.position,
                        application.location,
                        application.date_applied.isoformat(),
                        application.status.value,
                        application.salary,
                        application.notes,
                        application.job_url,
                        1 if application.posting_online else 0,
                        application.hiring_manager,
                        application.created_at.isoformat(),
                        application.updated_at.isoformat(),
                    ),
                )
                await conn.commit()

        return application

    async def get(self, owner_id: str, application_id: str) -> JobApplication | None:
        """Get one application by id.

        Returns:
            The application if it exists and belongs to ``owner_id``.
        """
        with store_errors("load application"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    "SELECT * FROM job_applications WHERE id = ? AND user_id = ?",
                    (application_id, owner_id),
                )
                row = await cursor.fetchone()

        if row is None:
            return None

        return self._row_to_application(row)

    async def list_for_owner(
        self,
        owner_id: str,
        include_archived: bool = False,
        order_by: SortKey = SortKey.DATE,
        ascending: bool = False,
    ) -> list[JobApplication]:
        """List all applications of one owner.

        Args:
            owner_id: Identity whose applications are listed.
            include_archived: Also return archived applications.
            order_by: Field to order by.
            ascending: Sort direction.

        Returns:
            Applications in the requested order.
        """
        order_sql = f"{ORDER_COLUMNS[order_by]} {'ASC' if ascending else 'DESC'}"
        query = "SELECT * FROM job_applications WHERE user_id = ?"
        params: tuple[Any, ...] = (owner_id,)
        if not include_archived:
            query += " AND status != ?"
            params += (ApplicationStatus.ARCHIVED.value,)
        query += f" ORDER BY {order_sql}"

        with store_errors("list applications"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(query, params)
                rows = await cursor.fetchall()

        return [self._row_to_application(row) for row in rows]

    async def update(
        self, owner_id: str, application_id: str, changes: dict[str, Any]
    ) -> JobApplication:
        """Replace some fields of an application.

        Also refreshes ``updated_at``.

        Args:
            owner_id: Owner of the application.
            application_id: Id of the application to update.
            changes: Column name to new value.

        Returns:
            The updated application.

        Raises:
            ValueError: If ``changes`` names a column that cannot be edited.
            RecordNotFoundError: If no such application exists for the owner.
        """
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update columns: {', '.join(sorted(unknown))}")

        assignments = [f"{key} = ?" for key in changes]
        values = [_to_column_value(key, value) for key, value in changes.items()]
        assignments.append("updated_at = ?")
        values.append(datetime.now(UTC).isoformat())

        with store_errors("update application"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    f"""
                    UPDATE job_applications
                    SET {", ".join(assignments)}
                    WHERE id = ? AND user_id = ?
                    """,
                    (*values, application_id, owner_id),
                )
                await conn.commit()
                updated = cursor.rowcount

        if not updated:
            raise RecordNotFoundError(f"Application not found: {application_id}")

        application = await self.get(owner_id, application_id)
        if application is None:
            raise RecordNotFoundError(f"Application not found: {application_id}")
        return application

    async def update_status(
        self, owner_id: str, application_id: str, status: ApplicationStatus
    ) -> JobApplication:
        """Set the status of an application.

        Returns:
            The updated application.
        """
        return await self.update(owner_id, application_id, {"status": status})

    async def delete(self, owner_id: str, application_id: str) -> None:
        """Permanently delete an application.

        Raises:
            RecordNotFoundError: If no such application exists for the owner.
        """
        with store_errors("delete application"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    "DELETE FROM job_applications WHERE id = ? AND user_id = ?",
                    (application_id, owner_id),
                )
                await conn.commit()
                deleted = cursor.rowcount

        if not deleted:
            raise RecordNotFoundError(f"Application not found: {application_id}")

    async def get_status_counts(self, owner_id: str) -> dict[ApplicationStatus, int]:
        """Return application counts grouped by status for one owner."""
        with store_errors("count applications"):
            async with self._get_connection() as conn:
                cursor = await conn.execute(
                    """
                    SELECT status, COUNT(*) AS count FROM job_applications
                    WHERE user_id = ?
                    GROUP BY status
                    """,
                    (owner_id,),
                )
                rows = await cursor.fetchall()

        counts: dict[ApplicationStatus, int] = {}
        for row in rows:
            try:
                status = ApplicationStatus(row["status"])
            except ValueError:
                continue
            counts[status] = int(row["count"]) if row["count"] is not None else 0
        return counts

    def _row_to_application(self, row: aiosqlite.Row) -> JobApplication:
        """Convert a database row to a JobApplication."""
        return JobApplication.from_dict(
            {
                **dict(row),
                "posting_online": bool(row["posting_online"]),
            }
        )
