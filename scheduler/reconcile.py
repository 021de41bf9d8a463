"""
History Reconciliation.

Folds snapshots from earlier runs into the current unit list before any
candidates are generated:
1. Tenant merge (who lives where).
2. Schedule merge (the schedule actually followed so far).
3. Schedule truncation (the last inspection that really happened).

Every operation returns a new list; the inputs are never mutated.
Units without a match pass through unchanged.
"""

import logging
from typing import List, Optional

from models import Unit, ScheduleEvent

logger = logging.getLogger(__name__)


def units_match(base: Unit, incoming: Unit) -> bool:
    """
    Natural-key comparison: address, city, state and zip must agree.
    The unit label only counts when the base record has one; a base
    record without a label matches any label at that address.
    """
    return (
        base.address == incoming.address
        and base.city == incoming.city
        and base.state == incoming.state
        and base.zip_code == incoming.zip_code
        and (base.unit_label == incoming.unit_label if base.unit_label else True)
    )


def find_match(base: Unit, candidates: List[Unit]) -> Optional[Unit]:
    return next((c for c in candidates if units_match(base, c)), None)


def merge_tenants(base: List[Unit], incoming: List[Unit]) -> List[Unit]:
    """
    Replace tenant lists with the ones from a tenant import.
    Existing tenants are flushed once up front, so several incoming rows for
    the same unit accumulate. Tenant records without a name are skipped.
    """
    merged = [u.model_copy(deep=True) for u in base]
    for u in merged:
        u.tenants = []

    added = 0
    for tp in incoming:
        if not tp.tenants:
            continue

        target = next((u for u in merged if units_match(u, tp)), None)
        if target is None:
            logger.debug(f"No unit matches tenant row {tp.describe()}")
            continue

        for tenant in tp.tenants:
            if not tenant.name or not tenant.name.strip():
                logger.warning(f"Skipping tenant {tenant.tenant_id} with missing name for address {tp.address}")
                continue
            target.tenants.append(tenant.model_copy())
            added += 1

    logger.info(f"Merged {added} tenant records into {len(merged)} units")
    return merged


def merge_schedules(base: List[Unit], incoming: List[Unit]) -> List[Unit]:
    """
    Seed each unit with the schedule from a previous run.
    A changed lease invalidates that history, so the imported events are
    discarded instead of copied.
    """
    merged = []
    for unit in base:
        unit = unit.model_copy(deep=True)
        prior = find_match(unit, incoming)
        if prior is not None:
            if prior.lease_start != unit.lease_start or prior.lease_end != unit.lease_end:
                logger.info(f"{unit.describe()}: lease changed since previous schedule, discarding {len(prior.events)} events")
                unit.events = []
            else:
                unit.events = [e.model_copy() for e in prior.events]
                logger.debug(f"{unit.describe()}: restored {len(unit.events)} events from previous schedule")
        merged.append(unit)
    return merged


def truncate_schedules(base: List[Unit], last_inspections: List[Unit]) -> List[Unit]:
    """
    Cut each unit's schedule at its last completed inspection.
    Everything on or after the cutoff is dropped and the cutoff itself is
    recorded as a historical event.
    """
    truncated = []
    for unit in base:
        unit = unit.model_copy(deep=True)
        record = find_match(unit, last_inspections)
        if record is not None and record.events:
            cutoff = record.events[0].date
            before = len(unit.events)
            unit.events = [e for e in unit.events if e.date < cutoff]
            unit.events.append(ScheduleEvent(date=cutoff, is_historical=True))
            logger.debug(f"{unit.describe()}: truncated at {cutoff}, dropped {before - len(unit.events) + 1} events")
        truncated.append(unit)
    return truncated


def reconcile(
    base: List[Unit],
    schedules: Optional[List[Unit]] = None,
    tenants: Optional[List[Unit]] = None,
    last_inspections: Optional[List[Unit]] = None,
) -> List[Unit]:
    """Apply whichever snapshots are available: schedules, then tenants, then truncation."""
    units = base
    if schedules is not None:
        units = merge_schedules(units, schedules)
    if tenants is not None:
        units = merge_tenants(units, tenants)
    if last_inspections is not None:
        units = truncate_schedules(units, last_inspections)
    return units
