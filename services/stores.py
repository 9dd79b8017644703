"""Bundle of repositories the onboarding services work against."""

from __future__ import annotations

from dataclasses import dataclass

from repositories.delegate_repository import DelegateRepository
from repositories.parent_repository import ParentRepository
from repositories.program_repository import ProgramAssignmentRepository, ProgramRepository
from repositories.reference_repository import ReferenceRepository
from repositories.staff_repository import StaffRepository
from repositories.users_repository import UserRepository


@dataclass
class RosterStores:
    programs: ProgramRepository
    assignments: ProgramAssignmentRepository
    users: UserRepository
    delegates: DelegateRepository
    staff: StaffRepository
    parents: ParentRepository
    references: ReferenceRepository

    @classmethod
    def default(cls) -> "RosterStores":
        return cls(
            programs=ProgramRepository(),
            assignments=ProgramAssignmentRepository(),
            users=UserRepository(),
            delegates=DelegateRepository(),
            staff=StaffRepository(),
            parents=ParentRepository(),
            references=ReferenceRepository(),
        )
