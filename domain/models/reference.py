"""Program-year activation views of groupings and parties."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GroupingRef:
    """An active grouping for a program year, joined with its grouping type."""

    grouping_id: str
    name: str
    is_assignment_level: bool


@dataclass(frozen=True)
class PartyRef:
    """An active party for a program year.

    ``year_party_id`` is the activation record id; delegates reference it.
    """

    party_id: str
    year_party_id: str
    name: str
    color: Optional[str] = None
