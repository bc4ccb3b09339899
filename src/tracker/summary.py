"""Summary counts and chart data for the application dashboard."""

from __future__ import annotations

from collections import Counter
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from src.tracker.models import (
    ApplicationStatus,
    JobApplication,
    status_color,
    status_label,
)


@dataclass(frozen=True)
class StatusCount:
    """Count of applications in one status, with its chart styling."""

    status: ApplicationStatus
    label: str
    color: str
    count: int


@dataclass(frozen=True)
class TrackerSummary:
    """Headline numbers shown above the application list.

    Attributes:
        total: Non-archived applications.
        interviews: Applications currently in Interview.
        offers: Applications currently in Offer.
        favorited: Size of the favorite set.
        by_status: Count for every status, zero included.
    """

    total: int
    interviews: int
    offers: int
    favorited: int
    by_status: dict[ApplicationStatus, int] = field(default_factory=dict)


def count_by_status(
    applications: Iterable[JobApplication],
) -> dict[ApplicationStatus, int]:
    """Count applications per status, with an entry for every status."""
    counts = Counter(app.status for app in applications)
    return {status: counts.get(status, 0) for status in ApplicationStatus}


def summarize(
    applications: Collection[JobApplication], favorites: Collection[str]
) -> TrackerSummary:
    """Compute the dashboard summary."""
    by_status = count_by_status(applications)
    total = sum(
        count for status, count in by_status.items() if not status.is_archived
    )
    return TrackerSummary(
        total=total,
        interviews=by_status[ApplicationStatus.INTERVIEW],
        offers=by_status[ApplicationStatus.OFFER],
        favorited=len(favorites),
        by_status=by_status,
    )


def status_breakdown(applications: Iterable[JobApplication]) -> list[StatusCount]:
    """Chart data: non-archived statuses that have at least one application."""
    by_status = count_by_status(
        app for app in applications if not app.status.is_archived
    )
    return [
        StatusCount(
            status=status,
            label=status_label(status),
            color=status_color(status),
            count=count,
        )
        for status, count in by_status.items()
        if count > 0
    ]
