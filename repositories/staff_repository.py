from __future__ import annotations

from typing import Optional

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.staff import Staff


class StaffRepository:
    """Repository for staff members of a program year."""

    def __init__(self) -> None:
        self.collection: Collection = mongodb.collection("staff")

    def ensure_indexes(self) -> None:
        self.collection.create_index(
            [("program_year_id", ASCENDING), ("email", ASCENDING)],
            unique=True,
            name="year_email",
        )

    def find(self, program_year_id: str, email: str) -> Optional[Staff]:
        doc = self.collection.find_one(
            {"program_year_id": program_year_id, "email": email.strip().lower()}
        )
        return Staff.from_mongo(doc)

    def create(self, staff: Staff) -> Staff:
        result = self.collection.insert_one(staff.to_mongo())
        return staff.model_copy(update={"id": str(result.inserted_id)})
