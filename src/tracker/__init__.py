"""Job application tracking.

This module provides the Application Tracker: a per-user list of job
applications with search, filtering, sorting, pagination and summary
counts.

Public API:
- TrackerService: Session controller for one signed-in user
- ApplicationRepository: Database repository for applications
- FavoriteStore: Device-local favorite set
- JobApplication: Data model for a stored application
- ApplicationDraft / ApplicationUpdate: Validated create/edit input
- ApplicationStatus: Enum for application status values
- ListQuery / ListPage: List selections and the derived page
"""

from src.tracker.favorites import FavoriteStore
from src.tracker.models import (
    ApplicationDraft,
    ApplicationStatus,
    ApplicationUpdate,
    JobApplication,
)
from src.tracker.pipeline import ListPage, ListQuery, SortDirection, SortKey
from src.tracker.repository import ApplicationRepository
from src.tracker.service import TrackerService

__all__ = [
    "TrackerService",
    "ApplicationRepository",
    "FavoriteStore",
    "JobApplication",
    "ApplicationDraft",
    "ApplicationUpdate",
    "ApplicationStatus",
    "ListQuery",
    "ListPage",
    "SortKey",
    "SortDirection",
]
