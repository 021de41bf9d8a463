"""
Per-unit Candidate Generator.

This module proposes inspection dates for one unit at a time, encoding the
lease-lifecycle policy:
1. Occupancy state (unoccupied, missing data, term already over).
2. Buffers after move-in and before move-out.
3. Gap-filling of a partially known (imported) history.

It knows nothing about other units; global capacity and blackouts are the
constraint engine's job.
"""

import logging
from datetime import date as date_type
from typing import List

from models import Unit, ScheduleEvent, SchedulingPolicy
from config import INSPECTION_PERIOD_MONTHS
from .dates import add_months, add_days, max_gap_hours, hours_between, midpoint

logger = logging.getLogger(__name__)

UNOCCUPIED = "Unoccupied"
MISSING_LEASE_START = "Missing lease start"
TERM_ENDED = "Term ended"
TERM_END_TOO_SOON = "Term end is too soon"


class CandidateGenerator:
    """
    Walks the decision ladder once per unit and appends candidate events.
    Existing events (historical ones included) are never removed.
    """

    def __init__(self, policy: SchedulingPolicy):
        self.policy = policy

    def generate(self, unit: Unit) -> Unit:
        unit = unit.model_copy(deep=True)
        policy = self.policy
        end = unit.effective_end

        # 1. Skip units nobody lives in
        if not unit.lease_start and not end:
            unit.status_message = UNOCCUPIED
            logger.debug(f"{unit.describe()}: no lease start or end, unoccupied")
            return unit

        if not unit.lease_start:
            unit.status_message = MISSING_LEASE_START
            logger.debug(f"{unit.describe()}: missing lease start")
            return unit

        # 2. First inspection waits for the move-in buffer and the earliest allowed date
        schedule_start = max(policy.move_in_buffer(unit.lease_start), policy.earliest_date)
        logger.debug(f"{unit.describe()}: lease start {unit.lease_start}, schedule starts {schedule_start}")

        # 3. Open-ended lease: run to the horizon without a move-out inspection
        if not end:
            if not unit.events:
                for d in self._periodic_dates(schedule_start, policy.horizon_date):
                    unit.events.append(ScheduleEvent(date=d))
                logger.debug(f"{unit.describe()}: open lease, {len(unit.events)} quarterly dates")
            else:
                self._fill_gaps(unit)
            return unit

        has_move_out = any(e.is_move_out for e in unit.events)
        if end < unit.lease_start:
            logger.warning(f"{unit.describe()}: occupancy ends {end}, before lease start {unit.lease_start}")

        # 4. Occupancy already over: move-out inspection as soon as possible
        if end < policy.earliest_date:
            unit.status_message = TERM_ENDED
            if not has_move_out:
                self._add_move_out(unit, add_days(policy.earliest_date, 1))
            return unit

        schedule_end = min(policy.move_out_buffer(end), policy.horizon_date)

        if schedule_end < policy.earliest_date:
            unit.status_message = TERM_END_TOO_SOON
            if not has_move_out:
                self._add_move_out(unit, add_days(end, 1))
            return unit

        # 5. Term narrower than the buffer window: one inspection right away
        if schedule_end < schedule_start:
            logger.debug(f"{unit.describe()}: term shorter than buffer, scheduling urgent inspection")
            if not unit.events:
                unit.events.append(ScheduleEvent(date=policy.earliest_date, is_urgent=True))
            if not has_move_out:
                self._add_move_out(unit, add_days(end, 1))
            return unit

        # 6. Normal case: continue the existing cadence, then quarterly up to the buffer
        if unit.events:
            self._fill_gaps(unit)
            resume = add_months(unit.events[-1].date, INSPECTION_PERIOD_MONTHS)
            schedule_start = max(schedule_start, resume)

        for d in self._periodic_dates(schedule_start, schedule_end):
            unit.events.append(ScheduleEvent(date=d))
            logger.debug(f"{unit.describe()}: scheduled {d}")

        if not unit.events:
            unit.events.append(ScheduleEvent(date=policy.earliest_date))
            logger.debug(f"{unit.describe()}: nothing fit, single inspection at {policy.earliest_date}")

        if not has_move_out:
            self._add_move_out(unit, add_days(end, 1))

        return unit

    def _periodic_dates(self, start: date_type, stop: date_type) -> List[date_type]:
        """Every period from start (inclusive) while strictly before stop."""
        dates = []
        n = 0
        d = start
        while d < stop:
            dates.append(d)
            n += 1
            d = add_months(start, n * INSPECTION_PERIOD_MONTHS)
        return dates

    def _fill_gaps(self, unit: Unit) -> None:
        """
        Insert one filler inspection into every gap wider than the threshold,
        keeping an irregular imported cadence rather than re-flattening it.
        Leaves unit.events sorted by date.
        """
        unit.events.sort(key=lambda e: e.date)
        limit = max_gap_hours()
        fillers = []
        for prev, nxt in zip(unit.events, unit.events[1:]):
            if hours_between(prev.date, nxt.date) > limit:
                filler = midpoint(prev.date, nxt.date)
                fillers.append(ScheduleEvent(date=filler))
                logger.debug(f"{unit.describe()}: inserted {filler} into gap after {prev.date}")
        unit.events.extend(fillers)
        unit.events.sort(key=lambda e: e.date)

    def _add_move_out(self, unit: Unit, d: date_type) -> None:
        unit.events.append(ScheduleEvent(date=d, is_move_out=True))
        logger.debug(f"{unit.describe()}: move-out inspection at {d}")


def generate_candidates(unit: Unit, policy: SchedulingPolicy) -> Unit:
    """Propose events for a single unit. The input unit is left untouched."""
    return CandidateGenerator(policy).generate(unit)


def generate_all(units: List[Unit], policy: SchedulingPolicy) -> List[Unit]:
    generator = CandidateGenerator(policy)
    return [generator.generate(u) for u in units]
