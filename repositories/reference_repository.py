from __future__ import annotations

from typing import Dict, List

from pymongo import ASCENDING
from pymongo.collection import Collection

from config.database import mongodb
from domain.models.base import as_object_id
from domain.models.reference import GroupingRef, PartyRef


class ReferenceRepository:
    """Groupings and parties, both program-wide and as activated for a year.

    Activation rows are returned in insertion order and are *not* deduplicated
    here; a year may carry more than one activation of the same grouping/party.
    """

    def __init__(self) -> None:
        self.grouping_types: Collection = mongodb.collection("grouping_types")
        self.groupings: Collection = mongodb.collection("groupings")
        self.year_groupings: Collection = mongodb.collection("program_year_groupings")
        self.parties: Collection = mongodb.collection("parties")
        self.year_parties: Collection = mongodb.collection("program_year_parties")

    def _by_id(self, collection: Collection, ids: List[str]) -> Dict[str, dict]:
        if not ids:
            return {}
        cursor = collection.find({"_id": {"$in": [as_object_id(i) for i in ids]}})
        return {str(doc["_id"]): doc for doc in cursor}

    def list_active_groupings_for_year(self, program_year_id: str) -> List[GroupingRef]:
        activations = list(
            self.year_groupings.find(
                {"program_year_id": program_year_id, "status": "active"}
            ).sort("_id", ASCENDING)
        )
        groupings = self._by_id(
            self.groupings, [str(a["grouping_id"]) for a in activations]
        )
        types = self._by_id(
            self.grouping_types,
            [str(g["grouping_type_id"]) for g in groupings.values() if g.get("grouping_type_id")],
        )

        refs: List[GroupingRef] = []
        for activation in activations:
            grouping = groupings.get(str(activation["grouping_id"]))
            if not grouping:
                continue
            gtype = types.get(str(grouping.get("grouping_type_id")), {})
            refs.append(
                GroupingRef(
                    grouping_id=str(grouping["_id"]),
                    name=str(grouping.get("name", "")),
                    is_assignment_level=bool(gtype.get("is_required", False)),
                )
            )
        return refs

    def list_active_parties_for_year(self, program_year_id: str) -> List[PartyRef]:
        activations = list(
            self.year_parties.find(
                {"program_year_id": program_year_id, "status": "active"}
            ).sort("_id", ASCENDING)
        )
        parties = self._by_id(self.parties, [str(a["party_id"]) for a in activations])

        refs: List[PartyRef] = []
        for activation in activations:
            party = parties.get(str(activation["party_id"]))
            if not party:
                continue
            refs.append(
                PartyRef(
                    party_id=str(party["_id"]),
                    year_party_id=str(activation["_id"]),
                    name=str(party.get("name", "")),
                    color=party.get("color"),
                )
            )
        return refs

    def list_program_groupings(self, program_id: str) -> List[dict]:
        """Active base groupings of a program as ``{id, name}``, sorted by name."""
        cursor = self.groupings.find(
            {"program_id": program_id, "status": "active"}, {"name": 1}
        ).sort("name", ASCENDING)
        return [{"id": str(doc["_id"]), "name": doc.get("name", "")} for doc in cursor]

    def list_program_parties(self, program_id: str) -> List[dict]:
        """Active base parties of a program as ``{id, name}``, sorted by name."""
        cursor = self.parties.find(
            {"program_id": program_id, "status": "active"}, {"name": 1}
        ).sort("name", ASCENDING)
        return [{"id": str(doc["_id"]), "name": doc.get("name", "")} for doc in cursor]
