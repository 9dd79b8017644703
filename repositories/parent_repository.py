from __future__ import annotations

from typing import Optional, Tuple

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.parent import DelegateParentLink, Parent


class ParentRepository:
    """Parents of a program year and their links to delegates."""

    def __init__(self) -> None:
        self.collection: Collection = mongodb.collection("parents")
        self.links: Collection = mongodb.collection("delegate_parent_links")

    def ensure_indexes(self) -> None:
        self.collection.create_index(
            [("program_year_id", ASCENDING), ("email", ASCENDING)],
            unique=True,
            name="year_email",
        )
        self.links.create_index(
            [("delegate_id", ASCENDING), ("parent_id", ASCENDING)],
            unique=True,
            name="delegate_parent",
        )

    def find(self, program_year_id: str, email: str) -> Optional[Parent]:
        doc = self.collection.find_one(
            {"program_year_id": program_year_id, "email": email.strip().lower()}
        )
        return Parent.from_mongo(doc)

    def create(self, parent: Parent) -> Parent:
        result = self.collection.insert_one(parent.to_mongo())
        return parent.model_copy(update={"id": str(result.inserted_id)})

    def find_or_create_link(
        self, delegate_id: str, parent_id: str, program_year_id: str
    ) -> Tuple[DelegateParentLink, bool]:
        """Guarantee a link exists without overwriting it. Returns ``(link, created)``."""
        link = DelegateParentLink(
            delegate_id=delegate_id,
            parent_id=parent_id,
            program_year_id=program_year_id,
        )
        result = self.links.update_one(
            {"delegate_id": delegate_id, "parent_id": parent_id},
            {"$setOnInsert": link.to_mongo()},
            upsert=True,
        )
        if result.upserted_id is not None:
            return link.model_copy(update={"id": str(result.upserted_id)}), True
        doc = self.links.find_one({"delegate_id": delegate_id, "parent_id": parent_id})
        return DelegateParentLink.from_mongo(doc) or link, False
