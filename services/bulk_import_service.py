# services/bulk_import_service.py
"""
================================================================================
Bulk Participant Onboarding
================================================================================

Turns an operator-filled CSV (or workbook) into delegates or staff for one
program year.

Functional Sections:
--------------------
1. Templates & Options (what the operator fills in)
2. Request Preconditions (content, program year, admin rights, kind, rows)
3. Preview (validation only, no writes)
4. Import (sequential create-or-link, per-row failure isolation)

Notes:
------
• Rows are processed strictly in input order; later rows' existence checks
  must see what earlier rows created (e.g. a shared new parent email).
• There is no batch transaction. A failed row is recorded and the loop moves
  on; re-submitting the same file converges instead of duplicating.
================================================================================
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple, Union

from domain.models.bulk_import import (
    ImportOutcome,
    ImportRow,
    ParticipantKind,
    PreviewResult,
    PreviewRow,
    ValidationIssue,
    ValidationResult,
)
from domain.models.delegate import Delegate, DelegateStatus
from domain.models.parent import Parent
from domain.models.program import AssignmentRole, Program, ProgramYear
from domain.models.staff import VALID_STAFF_ROLES, Staff, StaffRole
from domain.models.user import User
from middleware.errors import EmptyDataError, MissingContentError
from services.auth_service import (
    generate_temp_password,
    hash_password,
    load_program_year_for_admin,
    require_program_admin,
)
from services.email_service import send_welcome_email
from services.reference_service import ReferenceMaps, load_reference_maps
from services.stores import RosterStores
from utils import program_log
from utils.csv_table import CsvTable, parse_csv
from utils.row_validation import validate_delegate_row, validate_staff_row

# Hard cap on rows echoed back for the review table.
PREVIEW_ROW_LIMIT = 100

DELEGATE_TEMPLATE_HEADERS = [
    "firstName",
    "lastName",
    "email",
    "phone",
    "parentFirstName",
    "parentLastName",
    "parentEmail",
    "parentPhone",
]

STAFF_TEMPLATE_HEADERS = [
    "firstName",
    "lastName",
    "email",
    "phone",
    "role",
    "groupingName",
]

EmailSender = Callable[..., bool]
ImportContent = Union[str, CsvTable, None]


# ==============================================================================
# 1. Templates & Options
# ==============================================================================

def build_template(
    caller_id: Optional[str],
    program_id: str,
    kind: Union[str, ParticipantKind],
    *,
    stores: Optional[RosterStores] = None,
) -> str:
    """CSV template: header row plus ``#`` guidance lines the parser ignores."""
    stores = stores or RosterStores.default()
    require_program_admin(caller_id, program_id, assignment_repo=stores.assignments)
    kind = ParticipantKind.parse(kind)

    if kind is ParticipantKind.delegate:
        lines = [
            ",".join(DELEGATE_TEMPLATE_HEADERS),
            "# DELEGATE: firstName, lastName, email required; phone optional",
            "# PARENT: All parent fields are optional. If parentEmail is provided, "
            "parentFirstName and parentLastName are required",
            "#",
            "# Example (delegate only): John,Doe,john.doe@email.com,555-123-4567,,,,",
            "# Example (with parent):   John,Doe,john.doe@email.com,555-123-4567,"
            "Jane,Doe,jane.doe@email.com,555-987-6543",
        ]
    else:
        groupings = stores.references.list_program_groupings(program_id)
        names = ", ".join(g["name"] for g in groupings) or "None defined"
        lines = [
            ",".join(STAFF_TEMPLATE_HEADERS),
            f"# Valid groupings: {names}",
            f"# Valid roles: {', '.join(VALID_STAFF_ROLES)}",
            "#",
            "# Example: Jane,Smith,jane.smith@email.com,555-987-6543,counselor,",
        ]
    lines += ["#", "# --- Enter your data below this line ---"]
    return "\n".join(lines) + "\n"


def import_options(
    caller_id: Optional[str],
    program_id: str,
    *,
    stores: Optional[RosterStores] = None,
) -> Dict[str, list]:
    """Valid values an operator may use in an upload."""
    stores = stores or RosterStores.default()
    require_program_admin(caller_id, program_id, assignment_repo=stores.assignments)
    return {
        "groupings": stores.references.list_program_groupings(program_id),
        "parties": stores.references.list_program_parties(program_id),
        "roles": list(VALID_STAFF_ROLES),
    }


# ==============================================================================
# 2. Request Preconditions
# ==============================================================================

def _has_content(content: ImportContent) -> bool:
    if isinstance(content, CsvTable):
        return True
    # Non-text JSON values (numbers, lists, objects) count as missing.
    return isinstance(content, str) and bool(content.strip())


def _prepare(
    caller_id: Optional[str],
    program_year_id: str,
    kind: Union[str, ParticipantKind],
    content: ImportContent,
    stores: RosterStores,
) -> Tuple[ProgramYear, ParticipantKind, CsvTable]:
    """Check, in order: content present, year exists, caller is admin, kind, rows."""
    if not _has_content(content):
        raise MissingContentError()

    program_year = load_program_year_for_admin(
        caller_id,
        program_year_id,
        program_repo=stores.programs,
        assignment_repo=stores.assignments,
    )
    kind = ParticipantKind.parse(kind)

    table = content if isinstance(content, CsvTable) else parse_csv(content)
    if table.is_empty:
        raise EmptyDataError()
    return program_year, kind, table


def _row_emails(rows: List[ImportRow]) -> List[str]:
    emails = [row.email for row in rows]
    emails += [row.get("parentEmail").lower() for row in rows]
    return [e for e in emails if e]


def _validate(row: ImportRow, kind: ParticipantKind, refs: ReferenceMaps) -> ValidationResult:
    if kind is ParticipantKind.delegate:
        return validate_delegate_row(row)
    return validate_staff_row(row, refs.grouping_by_name)


# ==============================================================================
# 3. Preview
# ==============================================================================

def preview_import(
    caller_id: Optional[str],
    program_year_id: str,
    kind: Union[str, ParticipantKind],
    content: ImportContent,
    *,
    stores: Optional[RosterStores] = None,
) -> PreviewResult:
    """Dry run: validate every row and classify it, without writing anything."""
    stores = stores or RosterStores.default()
    program_year, kind, table = _prepare(caller_id, program_year_id, kind, content, stores)

    refs = load_reference_maps(
        program_year.id,
        _row_emails(table.rows),
        reference_repo=stores.references,
        user_repo=stores.users,
    )

    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    preview: List[PreviewRow] = []
    for row in table.rows:
        validation = _validate(row, kind, refs)
        errors.extend(validation.errors)
        warnings.extend(validation.warnings)
        preview.append(
            PreviewRow(
                row=row.row_number,
                data=row.values,
                status="existing" if refs.is_existing(row.email) else "new",
                valid=validation.valid,
            )
        )

    # Counted per row: two rows naming the same new parent count twice.
    new_parents = 0
    if kind is ParticipantKind.delegate:
        for entry in preview:
            parent_email = (entry.data.get("parentEmail") or "").strip()
            if entry.valid and parent_email and not refs.is_existing(parent_email):
                new_parents += 1

    valid = [p for p in preview if p.valid]
    return PreviewResult(
        headers=table.headers,
        total_rows=len(table.rows),
        valid_rows=len(valid),
        new_users=sum(1 for p in valid if p.status == "new"),
        existing_users=sum(1 for p in valid if p.status == "existing"),
        new_parents=new_parents,
        errors=errors,
        warnings=warnings,
        preview=preview[:PREVIEW_ROW_LIMIT],
    )


# ==============================================================================
# 4. Import
# ==============================================================================

class _RowImporter:
    """Create-or-link operations for one batch, sharing stores and counters."""

    def __init__(
        self,
        program: Program,
        program_year: ProgramYear,
        refs: ReferenceMaps,
        stores: RosterStores,
        outcome: ImportOutcome,
        *,
        send_emails: bool,
        email_sender: EmailSender,
        password_hasher: Callable[[str], str],
    ) -> None:
        self.program = program
        self.program_year = program_year
        self.refs = refs
        self.stores = stores
        self.outcome = outcome
        self.send_emails = send_emails
        self.email_sender = email_sender
        self.password_hasher = password_hasher

    @property
    def program_id(self) -> str:
        return self.program_year.program_id

    # --- shared steps ------------------------------------------------------

    def ensure_user(self, email: str, label: str = "user") -> Tuple[User, Optional[str]]:
        """Return the user for ``email``, creating it with a temporary password if needed."""
        user = self.stores.users.find_by_email(email)
        if user:
            return user, None
        temp_password = generate_temp_password()
        user = self.stores.users.create(email, self.password_hasher(temp_password))
        self.outcome.users_created += 1
        program_log.info(self.program_id, f"Bulk import: Created {label} {email}")
        return user, temp_password

    def ensure_program_assignment(self, user_id: str, role: AssignmentRole) -> None:
        if not self.stores.assignments.find(user_id, self.program_id):
            self.stores.assignments.create(user_id, self.program_id, role)

    def send_welcome(
        self,
        row: ImportRow,
        kind: ParticipantKind,
        temp_password: str,
        role_label: Optional[str] = None,
    ) -> None:
        """Email failures are counted, never raised; the row stays a success."""
        try:
            sent = self.email_sender(
                self.program_id,
                row.email,
                row.get("firstName"),
                row.get("lastName"),
                self.program.name,
                self.program_year.year,
                kind.value,
                role_label,
                temp_password,
            )
        except Exception as exc:
            self.outcome.emails_failed += 1
            program_log.error(self.program_id, f"Failed to send welcome email to {row.email}", exc)
            return
        if sent:
            self.outcome.emails_sent += 1
        else:
            self.outcome.emails_failed += 1

    # --- per kind ----------------------------------------------------------

    def import_delegate(self, row: ImportRow) -> bool:
        """Returns False when the delegate already exists (row skipped)."""
        email = row.email
        user, temp_password = self.ensure_user(email)

        if self.stores.delegates.find(self.program_year.id, email):
            return False

        delegate = self.stores.delegates.create(
            Delegate(
                program_year_id=self.program_year.id,
                first_name=row.get("firstName"),
                last_name=row.get("lastName"),
                email=email,
                phone=row.get("phone") or None,
                user_id=user.id,
                grouping_id=None,
                party_id=None,
                status=DelegateStatus.pending_assignment,
            )
        )
        self.ensure_program_assignment(user.id, AssignmentRole.delegate)
        program_log.info(
            self.program_id,
            f"Bulk import: Created delegate {row.get('firstName')} {row.get('lastName')}",
        )

        self.link_parent(row, delegate)

        if self.send_emails and temp_password:
            self.send_welcome(row, ParticipantKind.delegate, temp_password)
        return True

    def link_parent(self, row: ImportRow, delegate: Delegate) -> None:
        parent_email = row.get("parentEmail").lower()
        first_name = row.get("parentFirstName")
        last_name = row.get("parentLastName")
        if not (parent_email and first_name and last_name):
            return

        parent_user, _ = self.ensure_user(parent_email, label="parent user")

        parent = self.stores.parents.find(self.program_year.id, parent_email)
        if not parent:
            parent = self.stores.parents.create(
                Parent(
                    program_year_id=self.program_year.id,
                    first_name=first_name,
                    last_name=last_name,
                    email=parent_email,
                    phone=row.get("parentPhone") or None,
                    user_id=parent_user.id,
                )
            )
            self.outcome.parents_created += 1
            program_log.info(self.program_id, f"Bulk import: Created parent {first_name} {last_name}")

        _, created = self.stores.parents.find_or_create_link(
            delegate.id, parent.id, self.program_year.id
        )
        if created:
            program_log.info(
                self.program_id,
                f"Bulk import: Linked delegate {delegate.id} to parent {parent.id}",
            )

        self.ensure_program_assignment(parent_user.id, AssignmentRole.parent)

    def import_staff(self, row: ImportRow) -> bool:
        """Returns False when the staff member already exists (row skipped)."""
        email = row.email
        user, temp_password = self.ensure_user(email)

        if self.stores.staff.find(self.program_year.id, email):
            return False

        role = StaffRole(row.get("role").lower())
        grouping_name = row.get("groupingName").lower()
        grouping_id = self.refs.grouping_by_name.get(grouping_name) if grouping_name else None

        self.stores.staff.create(
            Staff(
                program_year_id=self.program_year.id,
                first_name=row.get("firstName"),
                last_name=row.get("lastName"),
                email=email,
                phone=row.get("phone") or None,
                user_id=user.id,
                role=role,
                grouping_id=grouping_id,
            )
        )
        self.ensure_program_assignment(
            user.id,
            AssignmentRole.admin if role is StaffRole.administrator else AssignmentRole.staff,
        )
        program_log.info(
            self.program_id,
            f"Bulk import: Created staff {row.get('firstName')} {row.get('lastName')} ({role.value})",
        )

        if self.send_emails and temp_password:
            self.send_welcome(row, ParticipantKind.staff, temp_password, role_label=row.get("role"))
        return True


def execute_import(
    caller_id: Optional[str],
    program_year_id: str,
    kind: Union[str, ParticipantKind],
    content: ImportContent,
    send_emails: bool = False,
    *,
    stores: Optional[RosterStores] = None,
    email_sender: EmailSender = send_welcome_email,
    password_hasher: Callable[[str], str] = hash_password,
) -> ImportOutcome:
    """Validate and persist every row; a bad row never aborts the batch."""
    stores = stores or RosterStores.default()
    program_year, kind, table = _prepare(caller_id, program_year_id, kind, content, stores)
    program = stores.programs.find_program(program_year.program_id) or Program(
        id=program_year.program_id, name=program_year.program_id
    )

    refs = load_reference_maps(program_year.id, reference_repo=stores.references)
    outcome = ImportOutcome()
    importer = _RowImporter(
        program,
        program_year,
        refs,
        stores,
        outcome,
        send_emails=send_emails,
        email_sender=email_sender,
        password_hasher=password_hasher,
    )

    for row in table.rows:
        validation = _validate(row, kind, refs)
        if not validation.valid:
            outcome.record_failure(row.row_number, row.email, validation.error_summary())
            continue

        try:
            if kind is ParticipantKind.delegate:
                created = importer.import_delegate(row)
            else:
                created = importer.import_staff(row)
        except Exception as exc:
            outcome.record_failure(row.row_number, row.email, str(exc) or "Unknown error")
            program_log.error(
                program_year.program_id, f"Bulk import error for row {row.row_number}", exc
            )
            continue

        if created:
            outcome.success += 1
        else:
            outcome.skipped += 1

    program_log.info(
        program_year.program_id,
        f"Bulk import completed: {outcome.success} success, "
        f"{outcome.failed} failed, {outcome.skipped} skipped",
    )
    return outcome
