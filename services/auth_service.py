# services/auth_service.py
"""Credentials and program-level permission checks."""

import secrets
import string
from typing import Optional

from werkzeug.security import generate_password_hash

from domain.models.program import AssignmentRole, ProgramYear
from middleware.errors import ForbiddenError, RecordNotFoundError
from repositories.program_repository import ProgramAssignmentRepository, ProgramRepository

TEMP_PASSWORD_LENGTH = 12
_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Random one-time password for a freshly created account."""
    return "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def is_program_admin(
    user_id: Optional[str],
    program_id: str,
    *,
    assignment_repo: Optional[ProgramAssignmentRepository] = None,
) -> bool:
    """True when the user holds the ``admin`` role on the program."""
    if not user_id:
        return False
    repo = assignment_repo or ProgramAssignmentRepository()
    assignment = repo.find(str(user_id), program_id)
    return bool(assignment) and assignment.role == AssignmentRole.admin


def require_program_admin(
    user_id: Optional[str],
    program_id: str,
    *,
    assignment_repo: Optional[ProgramAssignmentRepository] = None,
) -> None:
    if not is_program_admin(user_id, program_id, assignment_repo=assignment_repo):
        raise ForbiddenError()


def load_program_year_for_admin(
    user_id: Optional[str],
    program_year_id: str,
    *,
    program_repo: Optional[ProgramRepository] = None,
    assignment_repo: Optional[ProgramAssignmentRepository] = None,
) -> ProgramYear:
    """Resolve a program year (404 if unknown) and check admin rights on its program (403)."""
    program_repo = program_repo or ProgramRepository()
    program_year = program_repo.find_year(program_year_id)
    if not program_year:
        raise RecordNotFoundError("Program year not found")
    require_program_admin(user_id, program_year.program_id, assignment_repo=assignment_repo)
    return program_year
