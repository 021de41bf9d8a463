"""
Data models package for the Lease Inspection Scheduler.

This package exports the three core pillars of the data architecture:
1. Demand (Unit, TenantRecord)
2. Supply (SchedulingPolicy, blackout and buffer helpers)
3. Output (ScheduleEvent, EventKind)
"""

from .schedule import (
    ScheduleEvent,
    EventKind
)

from .unit import (
    Unit,
    TenantRecord
)

from .policy import (
    SchedulingPolicy,
    BlackoutCalendar,
    weekend_blackout,
    no_blackout,
    months_after,
    months_before
)

__all__ = [
    # --- Demand Models ---
    "Unit",
    "TenantRecord",

    # --- Policy & Constraint Models ---
    "SchedulingPolicy",
    "BlackoutCalendar",
    "weekend_blackout",
    "no_blackout",
    "months_after",
    "months_before",

    # --- Output Models ---
    "ScheduleEvent",
    "EventKind",
]
