"""Transient shapes used by the bulk onboarding pipeline.

None of these are persisted; they live for the duration of one request and
serialize to the camelCase JSON the admin UI consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Dict, List, Optional

from middleware.errors import InvalidKindError


class ParticipantKind(StrEnum):
    delegate = "delegate"
    staff = "staff"

    @classmethod
    def parse(cls, value: "str | ParticipantKind | None") -> "ParticipantKind":
        """Accept the URL forms ``delegates``/``staff`` only."""
        if isinstance(value, cls):
            return value
        text = (value or "").strip().lower()
        if text == "delegates":
            return cls.delegate
        if text == "staff":
            return cls.staff
        raise InvalidKindError()

    @property
    def plural(self) -> str:
        return "delegates" if self is ParticipantKind.delegate else "staff"


@dataclass
class ImportRow:
    """One CSV data row. ``row_number`` is 1-based with the header as row 1."""

    row_number: int
    values: Dict[str, str]

    def get(self, column: str) -> str:
        """Trimmed value for ``column``; missing columns read as empty."""
        return (self.values.get(column) or "").strip()

    @property
    def email(self) -> str:
        return self.get("email").lower()


@dataclass(frozen=True)
class ValidationIssue:
    row: int
    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "field": self.field, "message": self.message}


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def error_summary(self) -> str:
        return "; ".join(issue.message for issue in self.errors)


@dataclass
class PreviewRow:
    row: int
    data: Dict[str, str]
    status: str  # "new" | "existing"
    valid: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "data": dict(self.data),
            "status": self.status,
            "valid": self.valid,
        }


@dataclass
class PreviewResult:
    headers: List[str]
    total_rows: int
    valid_rows: int
    new_users: int
    existing_users: int
    new_parents: int
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue]
    preview: List[PreviewRow]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headers": list(self.headers),
            "totalRows": self.total_rows,
            "validRows": self.valid_rows,
            "newUsers": self.new_users,
            "existingUsers": self.existing_users,
            "newParents": self.new_parents,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "preview": [p.to_dict() for p in self.preview],
        }


@dataclass
class RowFailure:
    row: int
    email: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "email": self.email, "error": self.error}


@dataclass
class ImportOutcome:
    """Counters accumulated across the row loop; never rolled back."""

    success: int = 0
    failed: int = 0
    skipped: int = 0
    users_created: int = 0
    parents_created: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    errors: List[RowFailure] = field(default_factory=list)

    def record_failure(self, row: int, email: Optional[str], error: str) -> None:
        self.failed += 1
        self.errors.append(RowFailure(row=row, email=email or "N/A", error=error))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "failed": self.failed,
            "skipped": self.skipped,
            "usersCreated": self.users_created,
            "parentsCreated": self.parents_created,
            "emailsSent": self.emails_sent,
            "emailsFailed": self.emails_failed,
            "errors": [e.to_dict() for e in self.errors],
        }
