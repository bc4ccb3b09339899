"""Data models for the Application Tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, assert_never

from pydantic import BaseModel, Field, field_validator


class ApplicationStatus(str, Enum):
    """Status of a job application.

    Values match what is stored in the ``status`` column.
    """

    APPLIED = "Applied"
    INTERVIEW = "Interview"
    OFFER = "Offer"
    REJECTED = "Rejected"
    FOLLOW_UP = "Follow-up"
    ARCHIVED = "archived"

    @property
    def is_archived(self) -> bool:
        return self is ApplicationStatus.ARCHIVED

    @classmethod
    def parse(cls, value: str) -> ApplicationStatus:
        """Parse a status from user input, ignoring case and separators."""
        normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
        for status in cls:
            if status.value.lower() == normalized:
                return status
        raise ValueError(
            f"Invalid status: {value}. Must be one of "
            f"{', '.join(s.value for s in cls)}"
        )


def status_label(status: ApplicationStatus) -> str:
    """Human-readable label for a status."""
    match status:
        case ApplicationStatus.APPLIED:
            return "Applied"
        case ApplicationStatus.INTERVIEW:
            return "Interview"
        case ApplicationStatus.OFFER:
            return "Offer"
        case ApplicationStatus.REJECTED:
            return "Rejected"
        case ApplicationStatus.FOLLOW_UP:
            return "Follow-up"
        case ApplicationStatus.ARCHIVED:
            return "Archived"
        case _:
            assert_never(status)


def status_color(status: ApplicationStatus) -> str:
    """Chart color (hex) for a status."""
    match status:
        case ApplicationStatus.APPLIED:
            return "#3b82f6"
        case ApplicationStatus.INTERVIEW:
            return "#f59e0b"
        case ApplicationStatus.OFFER:
            return "#10b981"
        case ApplicationStatus.REJECTED:
            return "#ef4444"
        case ApplicationStatus.FOLLOW_UP:
            return "#8b5cf6"
        case ApplicationStatus.ARCHIVED:
            return "#6b7280"
        case _:
            assert_never(status)


def _parse_date(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def _parse_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class JobApplication:
    """A tracked job application owned by a single user.

    Attributes:
        id: Store-assigned unique identifier.
        user_id: Owner identity; never changes after creation.
        company: Company name.
        position: Job title.
        location: Job location.
        date_applied: Calendar date the application was made.
        status: Current status.
        created_at: Set once on insert.
        updated_at: Set on every mutation.
        salary: Salary range text (optional).
        notes: Free-form notes (optional).
        job_url: Link to the job posting (optional).
        posting_online: Whether the posting is still open.
        hiring_manager: Hiring manager name (optional).
    """

    id: str
    user_id: str
    company: str
    position: str
    location: str
    date_applied: date
    status: ApplicationStatus
    created_at: datetime
    updated_at: datetime
    salary: str | None = None
    notes: str | None = None
    job_url: str | None = None
    posting_online: bool = field(default=True)
    hiring_manager: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the application to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "company": self.company,
            "position": self.position,
            "location": self.location,
            "date_applied": self.date_applied.isoformat(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "salary": self.salary,
            "notes": self.notes,
            "job_url": self.job_url,
            "posting_online": self.posting_online,
            "hiring_manager": self.hiring_manager,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobApplication:
        """Deserialize an application from a dictionary."""
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            company=data["company"],
            position=data["position"],
            location=data["location"],
            date_applied=_parse_date(data["date_applied"]),
            status=ApplicationStatus(data["status"]),
            created_at=_parse_datetime(data["created_at"]),
            updated_at=_parse_datetime(data["updated_at"]),
            salary=data.get("salary"),
            notes=data.get("notes"),
            job_url=data.get("job_url"),
            posting_online=bool(data.get("posting_online", True)),
            hiring_manager=data.get("hiring_manager"),
        )


def _require_text(value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be empty")
    return stripped


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class ApplicationDraft(BaseModel):
    """User-submitted fields for a new application (no id yet)."""

    company: str = Field(..., description="Company name")
    position: str = Field(..., description="Job title")
    location: str = Field(..., description="Job location")
    status: ApplicationStatus = Field(default=ApplicationStatus.APPLIED)
    date_applied: date = Field(default_factory=date.today)
    salary: str | None = Field(default=None, description="Salary range")
    notes: str | None = None
    job_url: str | None = None
    posting_online: bool = True
    hiring_manager: str | None = None

    @field_validator("company", "position", "location")
    @classmethod
    def validate_required(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("salary", "notes", "job_url", "hiring_manager")
    @classmethod
    def validate_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class ApplicationUpdate(BaseModel):
    """Partial replacement of an application's editable fields.

    Only fields that were explicitly provided end up in ``changes()``.
    """

    company: str | None = None
    position: str | None = None
    location: str | None = None
    status: ApplicationStatus | None = None
    date_applied: date | None = None
    salary: str | None = None
    notes: str | None = None
    job_url: str | None = None
    posting_online: bool | None = None
    hiring_manager: str | None = None

    @field_validator("company", "position", "location")
    @classmethod
    def validate_required(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("must not be empty")
        return _require_text(v)

    @field_validator("salary", "notes", "job_url", "hiring_manager")
    @classmethod
    def validate_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)

    def changes(self) -> dict[str, Any]:
        """Return only the fields that were explicitly set.

        Optional text fields may be cleared with None; other fields set to
        None are ignored.
        """
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in CLEARABLE_FIELDS
        }


CLEARABLE_FIELDS = frozenset({"salary", "notes", "job_url", "hiring_manager"})
