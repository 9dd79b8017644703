from __future__ import annotations

from typing import Iterable, Optional, Set

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.user import User


class UserRepository:
    """CRUD operations for users collection. Emails are stored lower-cased."""

    def __init__(self) -> None:
        self.collection: Collection = mongodb.collection("users")

    def ensure_indexes(self) -> None:
        self.collection.create_index([("email", ASCENDING)], unique=True)

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        result = self.collection.insert_one(user.to_mongo())
        return user.model_copy(update={"id": str(result.inserted_id)})

    def find_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email.strip().lower()})
        return User.from_mongo(doc)

    def existing_emails(self, emails: Iterable[str]) -> Set[str]:
        """Return the subset of ``emails`` that already belong to a user."""
        wanted = sorted({e.strip().lower() for e in emails if e and e.strip()})
        if not wanted:
            return set()
        cursor = self.collection.find({"email": {"$in": wanted}}, {"email": 1})
        return {str(doc["email"]).lower() for doc in cursor if doc.get("email")}
