"""Field-level rules for a single bulk import row.

Both validators are pure: they never touch storage and never raise. Errors
block the row; warnings are informational only.
"""

from __future__ import annotations

import re
from typing import Mapping

from domain.models.bulk_import import ImportRow, ValidationIssue, ValidationResult
from domain.models.staff import VALID_STAFF_ROLES

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value.strip()))


def validate_delegate_row(row: ImportRow) -> ValidationResult:
    result = ValidationResult()
    n = row.row_number

    def error(field: str, message: str) -> None:
        result.errors.append(ValidationIssue(row=n, field=field, message=message))

    if not row.get("firstName"):
        error("firstName", "Delegate first name is required")
    if not row.get("lastName"):
        error("lastName", "Delegate last name is required")

    email = row.get("email")
    if not email:
        error("email", "Delegate email is required")
    elif not is_valid_email(email):
        error("email", "Invalid delegate email format")

    # Parent block is optional; a parent email makes the parent names mandatory.
    parent_email = row.get("parentEmail")
    if parent_email:
        if not is_valid_email(parent_email):
            error("parentEmail", "Invalid parent email format")
        if not row.get("parentFirstName"):
            error("parentFirstName", "Parent first name is required when parent email is provided")
        if not row.get("parentLastName"):
            error("parentLastName", "Parent last name is required when parent email is provided")

    return result


def validate_staff_row(row: ImportRow, grouping_map: Mapping[str, str]) -> ValidationResult:
    """Validate a staff row. ``grouping_map`` is keyed by lower-cased grouping name."""
    result = ValidationResult()
    n = row.row_number

    def error(field: str, message: str) -> None:
        result.errors.append(ValidationIssue(row=n, field=field, message=message))

    if not row.get("firstName"):
        error("firstName", "First name is required")
    if not row.get("lastName"):
        error("lastName", "Last name is required")

    email = row.get("email")
    if not email:
        error("email", "Email is required")
    elif not is_valid_email(email):
        error("email", "Invalid email format")

    role = row.get("role")
    if not role:
        error("role", "Role is required")
    elif role.lower() not in VALID_STAFF_ROLES:
        error("role", f'Invalid role "{role}". Valid: {", ".join(VALID_STAFF_ROLES)}')

    grouping_name = row.get("groupingName")
    if grouping_name and grouping_name.lower() not in grouping_map:
        result.warnings.append(
            ValidationIssue(
                row=n,
                field="groupingName",
                message=f'Grouping "{grouping_name}" not found, will be skipped',
            )
        )

    return result
