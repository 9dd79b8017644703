"""Result shapes for the balanced delegate assignment engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DelegateAssignment:
    delegate_id: str
    delegate_name: str
    grouping_id: str
    grouping_name: str
    party_id: str
    party_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "delegateId": self.delegate_id,
            "delegateName": self.delegate_name,
            "groupingId": self.grouping_id,
            "groupingName": self.grouping_name,
            "partyId": self.party_id,
            "partyName": self.party_name,
        }


@dataclass
class LoadSummary:
    """Existing / new / total counts for one grouping or one party."""

    id: str
    name: str
    existing: int = 0
    new: int = 0
    color: Optional[str] = None

    @property
    def total(self) -> int:
        return self.existing + self.new

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "existing": self.existing,
            "new": self.new,
            "total": self.total,
        }
        if self.color is not None:
            data["color"] = self.color
        return data


@dataclass
class AssignmentPreview:
    total_delegates: int
    already_assigned: int
    to_assign: int
    assignments: List[DelegateAssignment]
    groupings: List[LoadSummary]
    parties: List[LoadSummary]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDelegates": self.total_delegates,
            "alreadyAssigned": self.already_assigned,
            "toAssign": self.to_assign,
            "assignments": [a.to_dict() for a in self.assignments],
            "groupingSummary": [g.to_dict() for g in self.groupings],
            "partySummary": [p.to_dict() for p in self.parties],
        }


@dataclass
class AssignmentResult:
    assigned: int = 0
    failed: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)
    groupings: List[LoadSummary] = field(default_factory=list)
    parties: List[LoadSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "assigned": self.assigned,
            "failed": self.failed,
            "errors": list(self.errors),
            "groupingSummary": [g.to_dict() for g in self.groupings],
            "partySummary": [p.to_dict() for p in self.parties],
        }
