from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from domain.models.base import MongoModel


class AssignmentRole(StrEnum):
    admin = "admin"
    staff = "staff"
    delegate = "delegate"
    parent = "parent"


class Program(MongoModel):
    name: str = Field(..., min_length=1)
    status: str = "active"


class ProgramYear(MongoModel):
    """One annual instance of a program; the scope for every roster record."""

    program_id: str
    year: int
    status: str = "active"


class ProgramAssignment(MongoModel):
    """A user's role within a program (not year-scoped)."""

    user_id: str
    program_id: str
    role: AssignmentRole
