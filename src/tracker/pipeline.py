"""List derivation for the application dashboard.

Turns the owner's loaded applications into the visible page:
- text search over company, position and location
- status filter ("all" hides archived applications)
- stable sort on one field
- page slice plus pagination metadata

Everything here is pure; callers recompute whenever the loaded
applications or any query input changes.
"""

from __future__ import annotations

import locale
import math
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Literal

from src.tracker.models import ApplicationStatus, JobApplication

PAGE_SIZE_OPTIONS = (6, 12, 24, 48)
DEFAULT_PAGE_SIZE = 12

ALL_STATUSES = "all"

StatusFilter = ApplicationStatus | Literal["all"]


class SortKey(str, Enum):
    """Field the dashboard list is ordered by."""

    DATE = "date_applied"
    COMPANY = "company"
    POSITION = "position"
    STATUS = "status"


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


def parse_status_filter(value: str | None) -> StatusFilter:
    """Parse a status filter; empty or "all" selects every visible status."""
    if value is None or not value.strip() or value.strip().lower() == ALL_STATUSES:
        return ALL_STATUSES
    return ApplicationStatus.parse(value)


@dataclass(frozen=True)
class ListQuery:
    """Search, filter, sort and page selections for the dashboard list."""

    search: str = ""
    status_filter: StatusFilter = ALL_STATUSES
    sort_key: SortKey = SortKey.DATE
    direction: SortDirection = SortDirection.DESC
    page_size: int = DEFAULT_PAGE_SIZE
    page: int = 1


@dataclass(frozen=True)
class ListPage:
    """One page of the derived list."""

    items: list[JobApplication] = field(default_factory=list)
    total_count: int = 0
    total_pages: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def matches_search(application: JobApplication, search: str) -> bool:
    """Case-insensitive substring match on company, position or location."""
    if not search:
        return True
    needle = search.lower()
    return (
        needle in application.company.lower()
        or needle in application.position.lower()
        or needle in application.location.lower()
    )


def matches_status(application: JobApplication, status_filter: StatusFilter) -> bool:
    """Check an application against the status filter.

    The "all" filter is the default view and excludes archived
    applications; archived ones only show when selected explicitly.
    """
    if status_filter == ALL_STATUSES:
        return not application.status.is_archived
    return application.status == status_filter


def filter_records(
    applications: Sequence[JobApplication],
    search: str = "",
    status_filter: StatusFilter = ALL_STATUSES,
) -> list[JobApplication]:
    """Apply the text and status filters, keeping the input order."""
    return [
        app
        for app in applications
        if matches_search(app, search) and matches_status(app, status_filter)
    ]


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def _collation_key(value: str) -> tuple[str, str]:
    """Locale-aware key that ignores case and accents, then breaks ties on them.

    Under the "C" collation locale ``strxfrm`` compares by code point, so the
    base letters come first to keep "Émile" next to "ebay".
    """
    folded = value.casefold()
    return (locale.strxfrm(_strip_accents(folded)), locale.strxfrm(folded))


def _sort_value(
    application: JobApplication, key: SortKey
) -> date | tuple[str, str]:
    match key:
        case SortKey.DATE:
            return application.date_applied
        case SortKey.COMPANY:
            return _collation_key(application.company)
        case SortKey.POSITION:
            return _collation_key(application.position)
        case SortKey.STATUS:
            return _collation_key(application.status.value)
    raise ValueError(f"Unknown sort key: {key}")


def sort_records(
    applications: Sequence[JobApplication],
    key: SortKey = SortKey.DATE,
    direction: SortDirection = SortDirection.DESC,
) -> list[JobApplication]:
    """Stable sort on one field.

    Equal elements keep their original relative order in both directions.
    """
    return sorted(
        applications,
        key=lambda app: _sort_value(app, key),
        reverse=direction == SortDirection.DESC,
    )


def count_pages(total_count: int, page_size: int) -> int:
    """Number of pages needed for ``total_count`` items."""
    return math.ceil(total_count / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Clamp a requested page number into ``1..total_pages``."""
    return max(1, min(page, max(total_pages, 1)))


def paginate(
    applications: Sequence[JobApplication], page: int, page_size: int
) -> list[JobApplication]:
    """Return the slice for ``page`` (1-based); empty past the last page."""
    start = (page - 1) * page_size
    return list(applications[start : start + page_size])


def derive_page(
    applications: Sequence[JobApplication], query: ListQuery
) -> ListPage:
    """Filter, sort and paginate the loaded applications for display."""
    filtered = filter_records(applications, query.search, query.status_filter)
    ordered = sort_records(filtered, query.sort_key, query.direction)
    return ListPage(
        items=paginate(ordered, query.page, query.page_size),
        total_count=len(ordered),
        total_pages=count_pages(len(ordered), query.page_size),
        page=query.page,
        page_size=query.page_size,
    )
