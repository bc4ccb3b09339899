"""Business logic service for the Application Tracker.

This module provides the TrackerService class, which owns the session
state of one signed-in user:
- the applications loaded from the store
- the current search/filter/sort/page selections
- the device-local favorite set

Mutations go to the store first; the local list only changes after the
store call succeeds.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from src.auth.models import Identity
from src.tracker.favorites import FavoriteStore
from src.tracker.models import (
    ApplicationDraft,
    ApplicationStatus,
    ApplicationUpdate,
    JobApplication,
)
from src.tracker.pipeline import (
    ListPage,
    ListQuery,
    SortDirection,
    clamp_page,
    count_pages,
    derive_page,
    filter_records,
)
from src.tracker.repository import ApplicationRepository
from src.tracker.summary import StatusCount, TrackerSummary, status_breakdown, summarize
from src.utils.store import StoreError

logger = logging.getLogger(__name__)


class TrackerService:
    """Session controller for the application dashboard."""

    def __init__(
        self,
        repository: ApplicationRepository,
        favorites: FavoriteStore,
        identity: Identity,
        query: ListQuery | None = None,
    ):
        """Initialize the service.

        Args:
            repository: Store accessor for job applications.
            favorites: Favorite set, already loaded.
            identity: The signed-in owner.
            query: Initial list selections (defaults to ListQuery()).
        """
        self.repository = repository
        self.favorites = favorites
        self.identity = identity
        self.query = query or ListQuery()
        self.applications: list[JobApplication] = []

    @property
    def owner_id(self) -> str:
        return self.identity.id

    async def refresh(self) -> list[JobApplication]:
        """Reload the owner's applications from the store.

        Archived applications are only loaded when the archived filter is
        selected.
        """
        try:
            applications = await self.repository.list_for_owner(
                self.owner_id,
                include_archived=self.query.status_filter == ApplicationStatus.ARCHIVED,
                order_by=self.query.sort_key,
                ascending=self.query.direction == SortDirection.ASC,
            )
        except StoreError as e:
            logger.error("Error fetching applications: %s", e)
            raise

        self.applications = applications
        logger.debug("Loaded %d applications", len(applications))
        return applications

    def set_query(self, **changes: Any) -> ListQuery:
        """Change list selections.

        Any change other than the page number goes back to page 1.
        """
        if "page" not in changes:
            changes["page"] = 1
        self.query = dataclasses.replace(self.query, **changes)
        return self.query

    def go_to_page(self, page: int) -> ListPage:
        """Navigate to a page, clamped to the valid range."""
        visible = filter_records(
            self.applications, self.query.search, self.query.status_filter
        )
        total_pages = count_pages(len(visible), self.query.page_size)
        self.query = dataclasses.replace(
            self.query, page=clamp_page(page, total_pages)
        )
        return self.current_page()

    def current_page(self) -> ListPage:
        """Derive the visible page from the loaded applications."""
        return derive_page(self.applications, self.query)

    def summary(self) -> TrackerSummary:
        return summarize(self.applications, self.favorites.ids)

    def chart(self) -> list[StatusCount]:
        return status_breakdown(self.applications)

    async def status_counts(self) -> dict[ApplicationStatus, int]:
        """Count the owner's stored applications per status, archived included."""
        try:
            return await self.repository.get_status_counts(self.owner_id)
        except StoreError as e:
            logger.error("Error counting applications: %s", e)
            raise

    def get_application(self, application_id: str) -> JobApplication | None:
        """Find a loaded application by id."""
        for application in self.applications:
            if application.id == application_id:
                return application
        return None

    async def add_application(self, draft: ApplicationDraft) -> JobApplication:
        """Create an application and put it at the top of the local list."""
        try:
            application = await self.repository.insert(self.owner_id, draft)
        except StoreError as e:
            logger.error("Error adding application: %s", e)
            raise

        self.applications = [application, *self.applications]
        logger.info(
            "Added application %s (%s - %s)",
            application.id,
            application.company,
            application.position,
        )
        return application

    async def update_application(
        self, application_id: str, update: ApplicationUpdate
    ) -> JobApplication:
        """Apply an edit and replace the local copy."""
        try:
            application = await self.repository.update(
                self.owner_id, application_id, update.changes()
            )
        except StoreError as e:
            logger.error("Error updating application %s: %s", application_id, e)
            raise

        self._replace_local(application)
        return application

    async def set_status(
        self, application_id: str, status: ApplicationStatus
    ) -> JobApplication:
        """Move an application to another status."""
        try:
            application = await self.repository.update_status(
                self.owner_id, application_id, status
            )
        except StoreError as e:
            logger.error("Error updating status of %s: %s", application_id, e)
            raise

        self._replace_local(application)
        return application

    async def archive_application(self, application_id: str) -> None:
        """Archive an application, then re-fetch the list."""
        try:
            await self.repository.update_status(
                self.owner_id, application_id, ApplicationStatus.ARCHIVED
            )
        except StoreError as e:
            logger.error("Error archiving application %s: %s", application_id, e)
            raise

        await self.refresh()

    async def delete_application(self, application_id: str) -> None:
        """Permanently delete an application."""
        try:
            await self.repository.delete(self.owner_id, application_id)
        except StoreError as e:
            logger.error("Error deleting application %s: %s", application_id, e)
            raise

        self.applications = [
            app for app in self.applications if app.id != application_id
        ]
        logger.info("Deleted application %s", application_id)

    def toggle_favorite(self, application_id: str) -> bool:
        """Flip the favorite flag; returns the new state."""
        return self.favorites.toggle(application_id)

    def is_favorite(self, application_id: str) -> bool:
        return self.favorites.is_favorite(application_id)

    def _replace_local(self, application: JobApplication) -> None:
        self.applications = [
            application if app.id == application.id else app
            for app in self.applications
        ]
