from __future__ import annotations

from pydantic import Field, field_validator

from domain.models.base import MongoModel


class User(MongoModel):
    """Login identity. Emails are stored lower-cased and are unique."""

    email: str = Field(..., description="Unique login email")
    password_hash: str = Field(..., min_length=8, description="Hashed password")

    @field_validator("email", mode="before")
    @classmethod
    def _lower_email(cls, v):
        return str(v).strip().lower() if v is not None else v
