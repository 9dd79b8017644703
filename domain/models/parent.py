from __future__ import annotations

from typing import Optional

from pydantic import Field

from domain.models.base import MongoModel


class Parent(MongoModel):
    """Parent record, unique per (program year, email)."""

    program_year_id: str
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str
    phone: Optional[str] = None
    user_id: Optional[str] = None
    status: str = "active"


class DelegateParentLink(MongoModel):
    delegate_id: str
    parent_id: str
    program_year_id: str
    status: str = "active"
