from __future__ import annotations

from typing import Any, Dict, List, Optional

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.base import as_object_id
from domain.models.delegate import Delegate


class DelegateRepository:
    """Repository for delegates of a program year."""

    def __init__(self) -> None:
        self.collection: Collection = mongodb.collection("delegates")

    def ensure_indexes(self) -> None:
        self.collection.create_index(
            [("program_year_id", ASCENDING), ("email", ASCENDING)],
            unique=True,
            name="year_email",
        )

    def find(self, program_year_id: str, email: str) -> Optional[Delegate]:
        doc = self.collection.find_one(
            {"program_year_id": program_year_id, "email": email.strip().lower()}
        )
        return Delegate.from_mongo(doc)

    def create(self, delegate: Delegate) -> Delegate:
        result = self.collection.insert_one(delegate.to_mongo())
        return delegate.model_copy(update={"id": str(result.inserted_id)})

    def update(self, delegate_id: str, data: Dict[str, Any]) -> Optional[Delegate]:
        """Update fields for a delegate and return the updated delegate."""
        data = {k: v for k, v in data.items() if k not in ("_id", "id")}
        doc = self.collection.find_one_and_update(
            {"_id": as_object_id(delegate_id)}, {"$set": data}, return_document=True
        )
        return Delegate.from_mongo(doc)

    def list_for_year(self, program_year_id: str) -> List[Delegate]:
        cursor = self.collection.find({"program_year_id": program_year_id}).sort(
            "_id", ASCENDING
        )
        return [Delegate.from_mongo(doc) for doc in cursor]
