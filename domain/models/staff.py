from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import Field

from domain.models.base import MongoModel


class StaffRole(StrEnum):
    administrator = "administrator"
    counselor = "counselor"
    coordinator = "coordinator"
    volunteer = "volunteer"


VALID_STAFF_ROLES: list[str] = [role.value for role in StaffRole]


class Staff(MongoModel):
    program_year_id: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
    role: StaffRole
    grouping_id: Optional[str] = None
    status: str = "active"
