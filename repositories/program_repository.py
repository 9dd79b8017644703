from __future__ import annotations

from typing import Optional

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.base import as_object_id
from domain.models.program import AssignmentRole, Program, ProgramAssignment, ProgramYear


class ProgramRepository:
    """Read access to programs and their program years."""

    def __init__(self) -> None:
        self.programs: Collection = mongodb.collection("programs")
        self.years: Collection = mongodb.collection("program_years")

    def find_program(self, program_id: str) -> Optional[Program]:
        doc = self.programs.find_one({"_id": as_object_id(program_id)})
        return Program.from_mongo(doc)

    def find_year(self, program_year_id: str) -> Optional[ProgramYear]:
        doc = self.years.find_one({"_id": as_object_id(program_year_id)})
        return ProgramYear.from_mongo(doc)


class ProgramAssignmentRepository:
    """A user's role within a program; at most one row per (user, program)."""

    def __init__(self) -> None:
        self.collection: Collection = mongodb.collection("program_assignments")

    def ensure_indexes(self) -> None:
        self.collection.create_index(
            [("user_id", ASCENDING), ("program_id", ASCENDING)],
            unique=True,
            name="user_program",
        )

    def find(self, user_id: str, program_id: str) -> Optional[ProgramAssignment]:
        doc = self.collection.find_one({"user_id": user_id, "program_id": program_id})
        return ProgramAssignment.from_mongo(doc)

    def create(self, user_id: str, program_id: str, role: AssignmentRole) -> ProgramAssignment:
        assignment = ProgramAssignment(user_id=user_id, program_id=program_id, role=role)
        result = self.collection.insert_one(assignment.to_mongo())
        return assignment.model_copy(update={"id": str(result.inserted_id)})
