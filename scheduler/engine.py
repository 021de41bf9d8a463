"""
The Lease Inspection Scheduling pipeline.

This module wires the core stages together:
1. History Reconciliation (optional prior schedule).
2. Candidate Generation (per unit, lease-lifecycle policy).
3. Global Constraint Repair (horizon, blackouts, capacity).
4. Recombination (events back onto their units, input order preserved).
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models import Unit, SchedulingPolicy, EventKind
from .candidates import generate_all
from .constraints import flatten, sort_entries, repair_schedule, RepairLimitExceeded, ScheduleEntry
from .reconcile import merge_schedules

logger = logging.getLogger(__name__)


class ScheduleStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


class ScheduleResult(BaseModel):
    """
    Outcome of one pipeline run.
    On FAILED, `units` holds the generated but unrepaired candidates so status
    messages can still be shown, and `error` says why repair stopped.
    """
    status: ScheduleStatus = Field(default=ScheduleStatus.OK)
    units: List[Unit] = Field(default_factory=list)
    report: Dict[str, Any] = Field(default_factory=dict, description="Repair counters")
    error: Optional[str] = Field(default=None)

    @property
    def ok(self) -> bool:
        return self.status == ScheduleStatus.OK

    def get_statistics(self) -> Dict[str, Any]:
        """Summary for the final report."""
        by_kind: Dict[str, int] = defaultdict(int)
        by_date: Dict[Any, int] = defaultdict(int)
        for u in self.units:
            for e in u.events:
                by_kind[e.kind.value] += 1
                by_date[e.date] += 1

        busiest_day = max(by_date.items(), key=lambda x: x[1]) if by_date else None
        return {
            "status": self.status.value,
            "units": len(self.units),
            "scheduled_units": sum(1 for u in self.units if u.events),
            "total_events": sum(by_date.values()),
            "events_by_kind": {k.value: by_kind.get(k.value, 0) for k in EventKind},
            "busiest_day": busiest_day,
            "unscheduled": {u.unit_id: u.status_message for u in self.units if not u.events},
            **self.report,
        }


def recombine(units: List[Unit], entries: List[ScheduleEntry]) -> List[Unit]:
    """
    Put the repaired events back on their units, sorted by date.
    Output follows the order of `units`; units that lost every event keep
    their status message and an empty list. `entries` must reference the
    unit objects in `units` (as produced by flatten).
    """
    # Keyed by object identity; unit_id is not guaranteed unique for caller-built units
    surviving: Dict[int, list] = defaultdict(list)
    for entry in entries:
        surviving[id(entry.unit)].append(entry.event)

    out = []
    for unit in units:
        events = sorted(surviving.get(id(unit), []), key=lambda e: e.date)
        out.append(unit.model_copy(update={"events": events}))
    return out


def build_schedule(
    units: List[Unit],
    policy: SchedulingPolicy,
    prior_schedule: Optional[List[Unit]] = None,
) -> ScheduleResult:
    """
    Run the full pipeline. Inputs are copied, never mutated.
    """
    logger.info(f"Scheduling {len(units)} units between {policy.earliest_date} and {policy.horizon_date}")

    base = [u.model_copy(deep=True) for u in units]
    if prior_schedule:
        base = merge_schedules(base, prior_schedule)

    candidates = generate_all(base, policy)
    logger.info(f"Generated {sum(len(u.events) for u in candidates)} candidate events")

    entries = flatten(candidates)
    sort_entries(entries)
    snapshot = [u.model_copy(deep=True) for u in candidates]

    try:
        entries, report = repair_schedule(entries, policy)
    except RepairLimitExceeded as e:
        logger.error(f"Schedule repair failed: {e}")
        return ScheduleResult(
            status=ScheduleStatus.FAILED,
            units=snapshot,
            report={"iterations": e.iterations},
            error=str(e),
        )

    scheduled = recombine(candidates, entries)
    return ScheduleResult(units=scheduled, report=report.as_dict())
