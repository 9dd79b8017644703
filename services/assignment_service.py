# services/assignment_service.py
"""
Balanced random placement of delegates into (grouping, party) pairs.

Each run recomputes the load counters from storage, shuffles the unassigned
delegates and hands every delegate, in shuffle order, to the least-loaded
grouping and then the least-loaded party within that grouping. Ties go to the
first grouping/party in activation order, so a fixed shuffle reproduces the
same placement.

Preview and commit share the planning step; only commit writes.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from domain.models.assignment import (
    AssignmentPreview,
    AssignmentResult,
    DelegateAssignment,
    LoadSummary,
)
from domain.models.delegate import Delegate, DelegateStatus
from domain.models.program import ProgramYear
from domain.models.reference import GroupingRef, PartyRef
from middleware.errors import NothingToAssignError, ValidationError
from services.auth_service import load_program_year_for_admin
from services.reference_service import load_reference_maps
from services.stores import RosterStores
from utils import program_log

# Preview lists at most this many placements; summaries always cover everyone.
ASSIGNMENT_PREVIEW_LIMIT = 50


@dataclass
class LoadCounters:
    """Delegates per grouping, and per party within each grouping.

    Every eligible (grouping, party) pair has a cell, zero or not. Counters
    only ever grow during a run.
    """

    grouping_total: Dict[str, int] = field(default_factory=dict)
    grouping_party_count: Dict[str, Dict[str, int]] = field(default_factory=dict)

    @classmethod
    def empty(cls, groupings: List[GroupingRef], parties: List[PartyRef]) -> "LoadCounters":
        counters = cls()
        for grouping in groupings:
            counters.grouping_total[grouping.grouping_id] = 0
            counters.grouping_party_count[grouping.grouping_id] = {
                party.year_party_id: 0 for party in parties
            }
        return counters

    def record(self, grouping_id: str, party_id: str) -> None:
        self.grouping_total[grouping_id] += 1
        self.grouping_party_count[grouping_id][party_id] += 1

    def least_loaded(self) -> Tuple[str, str]:
        grouping_id = _first_minimum(self.grouping_total)
        party_id = _first_minimum(self.grouping_party_count[grouping_id])
        return grouping_id, party_id


def _first_minimum(counts: Dict[str, int]) -> str:
    """Key with the smallest count; the earliest key wins ties."""
    best_key: Optional[str] = None
    best_count = 0
    for key, count in counts.items():
        if best_key is None or count < best_count:
            best_key, best_count = key, count
    if best_key is None:
        raise ValueError("no candidates to choose from")
    return best_key


@dataclass
class AssignmentPlan:
    program_year: ProgramYear
    groupings: List[GroupingRef]
    parties: List[PartyRef]
    assigned: List[Delegate]
    unassigned: List[Delegate]
    existing: LoadCounters
    counters: LoadCounters
    placements: List[DelegateAssignment] = field(default_factory=list)

    def summaries(self) -> Tuple[List[LoadSummary], List[LoadSummary]]:
        groupings = [
            LoadSummary(
                id=g.grouping_id,
                name=g.name,
                existing=self.existing.grouping_total[g.grouping_id],
                new=self.counters.grouping_total[g.grouping_id]
                - self.existing.grouping_total[g.grouping_id],
            )
            for g in self.groupings
        ]
        parties = []
        for p in self.parties:
            existing = sum(
                cells[p.year_party_id] for cells in self.existing.grouping_party_count.values()
            )
            total = sum(
                cells[p.year_party_id] for cells in self.counters.grouping_party_count.values()
            )
            parties.append(
                LoadSummary(
                    id=p.year_party_id,
                    name=p.name,
                    existing=existing,
                    new=total - existing,
                    color=p.color,
                )
            )
        return groupings, parties


def plan_assignment(
    program_year: ProgramYear,
    *,
    stores: RosterStores,
    rng: Optional[random.Random] = None,
) -> AssignmentPlan:
    """Compute placements for every unassigned delegate without persisting them."""
    rng = rng or random.Random()
    refs = load_reference_maps(program_year.id, reference_repo=stores.references)
    if not refs.groupings:
        raise ValidationError("No eligible groupings are active for this program year")
    if not refs.parties:
        raise ValidationError("No parties are active for this program year")

    delegates = [
        d
        for d in stores.delegates.list_for_year(program_year.id)
        if d.status != DelegateStatus.withdrawn
    ]
    assigned = [d for d in delegates if d.is_assigned]
    unassigned = [d for d in delegates if not d.is_assigned]
    if not unassigned:
        raise NothingToAssignError()

    existing = LoadCounters.empty(refs.groupings, refs.parties)
    counters = LoadCounters.empty(refs.groupings, refs.parties)
    for delegate in assigned:
        party_id = refs.party_aliases.get(delegate.party_id)
        # Placements outside the eligible set keep their slot but carry no load here.
        if delegate.grouping_id not in counters.grouping_total or party_id is None:
            continue
        existing.record(delegate.grouping_id, party_id)
        counters.record(delegate.grouping_id, party_id)

    grouping_names = {g.grouping_id: g.name for g in refs.groupings}
    party_names = {p.year_party_id: p.name for p in refs.parties}

    plan = AssignmentPlan(
        program_year=program_year,
        groupings=refs.groupings,
        parties=refs.parties,
        assigned=assigned,
        unassigned=list(unassigned),
        existing=existing,
        counters=counters,
    )
    rng.shuffle(plan.unassigned)
    for delegate in plan.unassigned:
        grouping_id, party_id = counters.least_loaded()
        counters.record(grouping_id, party_id)
        plan.placements.append(
            DelegateAssignment(
                delegate_id=delegate.id,
                delegate_name=delegate.full_name,
                grouping_id=grouping_id,
                grouping_name=grouping_names[grouping_id],
                party_id=party_id,
                party_name=party_names[party_id],
            )
        )
    return plan


def preview_assignment(
    caller_id: Optional[str],
    program_year_id: str,
    *,
    stores: Optional[RosterStores] = None,
    rng: Optional[random.Random] = None,
) -> AssignmentPreview:
    stores = stores or RosterStores.default()
    program_year = load_program_year_for_admin(
        caller_id,
        program_year_id,
        program_repo=stores.programs,
        assignment_repo=stores.assignments,
    )
    plan = plan_assignment(program_year, stores=stores, rng=rng)
    groupings, parties = plan.summaries()
    return AssignmentPreview(
        total_delegates=len(plan.assigned) + len(plan.unassigned),
        already_assigned=len(plan.assigned),
        to_assign=len(plan.unassigned),
        assignments=plan.placements[:ASSIGNMENT_PREVIEW_LIMIT],
        groupings=groupings,
        parties=parties,
    )


def commit_assignment(
    caller_id: Optional[str],
    program_year_id: str,
    *,
    stores: Optional[RosterStores] = None,
    rng: Optional[random.Random] = None,
) -> AssignmentResult:
    """Persist a fresh plan; one failing delegate does not stop the others."""
    stores = stores or RosterStores.default()
    program_year = load_program_year_for_admin(
        caller_id,
        program_year_id,
        program_repo=stores.programs,
        assignment_repo=stores.assignments,
    )
    plan = plan_assignment(program_year, stores=stores, rng=rng)
    program_id = program_year.program_id
    statuses = {d.id: d.status for d in plan.unassigned}

    result = AssignmentResult()
    for placement in plan.placements:
        update = {"grouping_id": placement.grouping_id, "party_id": placement.party_id}
        if statuses.get(placement.delegate_id) == DelegateStatus.pending_assignment:
            update["status"] = DelegateStatus.active.value
        try:
            stores.delegates.update(placement.delegate_id, update)
        except Exception as exc:
            result.failed += 1
            result.errors.append(
                {"delegateId": placement.delegate_id, "error": str(exc) or "Unknown error"}
            )
            program_log.error(
                program_id, f"Random assignment failed for delegate {placement.delegate_id}", exc
            )
            continue
        result.assigned += 1
        program_log.info(
            program_id,
            f"Random assignment: delegate {placement.delegate_id} "
            f"({placement.delegate_name}) -> {placement.grouping_name} / {placement.party_name}",
        )

    result.groupings, result.parties = plan.summaries()
    program_log.info(
        program_id,
        f"Random assignment completed: {result.assigned} assigned, {result.failed} failed",
    )
    return result
