"""Program-year lookup tables shared by the importer and the assignment engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from domain.models.reference import GroupingRef, PartyRef
from repositories.reference_repository import ReferenceRepository
from repositories.users_repository import UserRepository


@dataclass
class ReferenceMaps:
    groupings: List[GroupingRef] = field(default_factory=list)
    parties: List[PartyRef] = field(default_factory=list)
    # lower-cased name -> grouping id, over every active grouping of any level
    grouping_by_name: Dict[str, str] = field(default_factory=dict)
    # lower-cased name -> party activation
    party_by_name: Dict[str, PartyRef] = field(default_factory=dict)
    # any activation id or base party id -> kept year_party_id
    party_aliases: Dict[str, str] = field(default_factory=dict)
    existing_emails: Set[str] = field(default_factory=set)

    def is_existing(self, email: Optional[str]) -> bool:
        return bool(email) and email.strip().lower() in self.existing_emails


def eligible_groupings(refs: Iterable[GroupingRef]) -> List[GroupingRef]:
    """Assignment-level groupings, first activation per grouping wins."""
    seen: Set[str] = set()
    kept: List[GroupingRef] = []
    for ref in refs:
        if not ref.is_assignment_level or ref.grouping_id in seen:
            continue
        seen.add(ref.grouping_id)
        kept.append(ref)
    return kept


def grouping_name_map(refs: Iterable[GroupingRef]) -> Dict[str, str]:
    """Name lookup for staff placement; the first activation of a name wins."""
    names: Dict[str, str] = {}
    for ref in refs:
        names.setdefault(ref.name.strip().lower(), ref.grouping_id)
    return names


def unique_parties(refs: Iterable[PartyRef]) -> Tuple[List[PartyRef], Dict[str, str]]:
    """First activation per base party wins; duplicates alias onto it."""
    kept: Dict[str, PartyRef] = {}
    aliases: Dict[str, str] = {}
    for ref in refs:
        canonical = kept.setdefault(ref.party_id, ref)
        aliases[ref.year_party_id] = canonical.year_party_id
        aliases[ref.party_id] = canonical.year_party_id
    return list(kept.values()), aliases


def load_reference_maps(
    program_year_id: str,
    emails: Iterable[str] = (),
    *,
    reference_repo: Optional[ReferenceRepository] = None,
    user_repo: Optional[UserRepository] = None,
) -> ReferenceMaps:
    """Build the per-request lookup tables for one program year.

    ``emails`` are the participant and parent addresses found in the upload;
    only those are checked against the user table.
    """
    reference_repo = reference_repo or ReferenceRepository()

    active_groupings = reference_repo.list_active_groupings_for_year(program_year_id)
    groupings = eligible_groupings(active_groupings)
    parties, aliases = unique_parties(reference_repo.list_active_parties_for_year(program_year_id))

    existing: Set[str] = set()
    wanted = {e.strip().lower() for e in emails if e and e.strip()}
    if wanted:
        user_repo = user_repo or UserRepository()
        existing = {e.lower() for e in user_repo.existing_emails(wanted)}

    return ReferenceMaps(
        groupings=groupings,
        parties=parties,
        grouping_by_name=grouping_name_map(active_groupings),
        party_by_name={p.name.strip().lower(): p for p in parties},
        party_aliases=aliases,
        existing_emails=existing,
    )
