from __future__ import annotations

from typing import Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

M = TypeVar("M", bound="MongoModel")


class MongoModel(BaseModel):
    """Base for documents stored in MongoDB with a string ``id`` mapped to ``_id``."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: Optional[str] = Field(default=None, alias="_id", description="MongoDB identifier")

    def to_mongo(self) -> dict:
        data = self.model_dump(exclude_none=True, by_alias=True)
        if isinstance(data.get("_id"), str) and ObjectId.is_valid(data["_id"]):
            data["_id"] = ObjectId(data["_id"])
        return data

    @classmethod
    def from_mongo(cls: type[M], doc: dict | None) -> M | None:
        if not doc:
            return None
        doc = dict(doc)
        if doc.get("_id") is not None:
            doc["_id"] = str(doc["_id"])
        return cls.model_validate(doc)


def as_object_id(value: str | ObjectId):
    """Use an ObjectId for lookups when ``value`` looks like one, otherwise the raw value."""
    if isinstance(value, ObjectId):
        return value
    return ObjectId(value) if ObjectId.is_valid(str(value)) else value
