"""
Global Constraint Engine.

This module takes the union of every unit's candidate events and repairs it
until no hard constraint is violated:
1. Horizon (events past the horizon are dropped).
2. Blackouts (events on closed days roll forward).
3. Capacity (too many inspections on one day or in one ISO week).

The pass is greedy and order sensitive. Which events move is decided by a
locality heuristic: whole zip-code groups move before a group is split, and
the triggering unit's own neighbourhood moves last.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date as date_type, timedelta
from typing import Callable, Hashable, List, Tuple

from models import Unit, ScheduleEvent, SchedulingPolicy
from .dates import iso_week
from .state import RepairState, RepairReport

logger = logging.getLogger(__name__)


class RepairLimitExceeded(RuntimeError):
    """The repair loop did not reach a fixed point within policy.max_iterations steps."""

    def __init__(self, iterations: int, entry: "ScheduleEntry"):
        self.iterations = iterations
        self.entry = entry
        super().__init__(
            f"Schedule repair stopped after {iterations} steps at {entry.unit.describe()} "
            f"({entry.event.date}); check that the blackout resolver always returns an open date"
        )


@dataclass(eq=False)
class ScheduleEntry:
    """One event together with the unit that owns it. Compared by identity."""
    unit: Unit
    event: ScheduleEvent

    @property
    def date(self) -> date_type:
        return self.event.date

    @property
    def zip_code(self) -> int:
        return self.unit.zip_code or 0


def flatten(units: List[Unit]) -> List[ScheduleEntry]:
    """One entry per event. Entries share the units' event objects."""
    return [ScheduleEntry(unit=u, event=e) for u in units for e in u.events]


def sort_key(entry: ScheduleEntry):
    u = entry.unit
    return (entry.event.date, entry.zip_code, u.city or "", u.address)


def sort_entries(entries: List[ScheduleEntry]) -> None:
    """Canonical order: date, zip code, city, address. Stable."""
    entries.sort(key=sort_key)


def select_capacity_shift(trigger: ScheduleEntry, movable: List[ScheduleEntry], count: int) -> List[ScheduleEntry]:
    """
    Pick `count` entries from `movable` to push to a later day.

    Priority: other zip-code groups first (the last group in canonical order
    goes first), then the trigger's zip code, then the trigger's own unit.
    A group is taken whole when it fits in what is left to move, otherwise
    only its tail is taken.
    """
    same_unit = [e for e in movable if e.unit is trigger.unit]
    same_zip = [e for e in movable if e.zip_code == trigger.zip_code and e not in same_unit]

    other_groups: "OrderedDict[int, List[ScheduleEntry]]" = OrderedDict()
    for e in movable:
        if e in same_unit or e in same_zip:
            continue
        other_groups.setdefault(e.zip_code, []).append(e)

    groups = list(reversed(list(other_groups.values()))) + [same_zip, same_unit]

    selected: List[ScheduleEntry] = []
    remaining = count
    for group in groups:
        if remaining <= 0:
            break
        if not group:
            continue
        if len(group) <= remaining:
            selected.extend(group)
            remaining -= len(group)
        else:
            selected.extend(group[-remaining:])
            remaining = 0
    return selected


class ConstraintEngine:
    """
    Repairs a flat, canonically sorted list of entries in place.
    """

    def __init__(self, policy: SchedulingPolicy):
        self.policy = policy

    def repair(self, entries: List[ScheduleEntry]) -> RepairReport:
        policy = self.policy
        state = RepairState()
        report = RepairReport()
        sort_entries(entries)

        while state.cursor < len(entries):
            state.iterations += 1
            entry = entries[state.cursor]
            if state.iterations > policy.max_iterations:
                report.iterations = state.iterations
                raise RepairLimitExceeded(state.iterations, entry)

            # 1. Imported history is the actual schedule followed; leave it alone
            if entry.event.is_historical:
                state.advance()
                continue

            d = entry.event.date

            # 2. Horizon
            if d > policy.horizon_date:
                logger.debug(f"{entry.unit.describe()}: removing {d}, after horizon {policy.horizon_date}")
                del entries[state.cursor]
                report.record_drop(entry.unit.unit_id, d)
                state.restart(state.cursor)
                continue

            # 3. Blackouts
            opened = policy.resolve_blackout(d)
            if opened != d:
                logger.debug(f"{entry.unit.describe()}: pushed {d} past a blackout to {opened}")
                entry.event.date = opened
                report.blackout_moves += 1
                self._resort(entries, state, [entry])
                continue

            # 4. Capacity per day, then per ISO week
            if self._enforce_capacity(entries, state, report, entry, "day", lambda e: e.event.date, policy.max_per_day):
                continue
            if self._enforce_capacity(entries, state, report, entry, "week", lambda e: iso_week(e.event.date), policy.max_per_week):
                continue

            state.advance()

        report.iterations = state.iterations
        return report

    def _enforce_capacity(
        self,
        entries: List[ScheduleEntry],
        state: RepairState,
        report: RepairReport,
        entry: ScheduleEntry,
        scope: str,
        bucket: Callable[[ScheduleEntry], Hashable],
        limit: int,
    ) -> bool:
        """
        Shift entries out of the trigger's bucket when it is over capacity.
        Returns True when something moved and the scan must restart.
        """
        key = bucket(entry)
        same = [e for i, e in enumerate(entries) if i != state.cursor and bucket(e) == key]
        if len(same) <= limit - 1:
            return False

        locked = [e for e in same if e.event.is_locked]
        if len(locked) == len(same):
            logger.debug(f"{len(same) + 1} inspections over {scope} limit {limit} for {key}, all locked (move-out or historical)")
            report.locked_overflows += 1
            return False

        movable = [e for e in same if not e.event.is_locked]
        count = len(movable) - (limit - 1 - len(locked))
        moved = select_capacity_shift(entry, movable, count)
        for e in moved:
            e.event.date = e.event.date + timedelta(days=1)

        if scope == "day":
            report.day_shifts += len(moved)
        else:
            report.week_shifts += len(moved)
        logger.debug(f"{len(same) + 1} inspections over {scope} limit {limit} for {key}; moved {len(moved)} of {len(movable)} movable")

        self._resort(entries, state, moved)
        return True

    def _resort(self, entries: List[ScheduleEntry], state: RepairState, moved: List[ScheduleEntry]) -> None:
        # Positions before the first moved entry (old or new position) keep their entries
        moved_ids = {id(e) for e in moved}
        touched = min(i for i, e in enumerate(entries) if id(e) in moved_ids)
        sort_entries(entries)
        touched = min([touched] + [i for i, e in enumerate(entries) if id(e) in moved_ids])
        state.restart(touched)


def repair_schedule(entries: List[ScheduleEntry], policy: SchedulingPolicy) -> Tuple[List[ScheduleEntry], RepairReport]:
    """
    Repair `entries` until no violation remains.

    The list and the events it references are owned by the call and
    modified in place; pass copies if the originals must survive.
    """
    report = ConstraintEngine(policy).repair(entries)
    logger.info(
        f"Repair finished after {report.iterations} steps: {len(report.dropped)} dropped, "
        f"{report.blackout_moves} blackout moves, {report.day_shifts + report.week_shifts} capacity shifts"
    )
    return entries, report
