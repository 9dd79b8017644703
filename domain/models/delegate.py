from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import Field

from domain.models.base import MongoModel


class DelegateStatus(StrEnum):
    pending_assignment = "pending_assignment"
    active = "active"
    withdrawn = "withdrawn"


class Delegate(MongoModel):
    program_year_id: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
    grouping_id: Optional[str] = None
    # References the program-year party activation, not the base party.
    party_id: Optional[str] = None
    status: DelegateStatus = DelegateStatus.pending_assignment

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_assigned(self) -> bool:
        """Both a grouping and a party are required to count as placed."""
        return bool(self.grouping_id) and bool(self.party_id)
