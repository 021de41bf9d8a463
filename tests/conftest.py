from __future__ import annotations

from datetime import date

import pytest

from models import SchedulingPolicy, ScheduleEvent, Unit, no_blackout


@pytest.fixture
def policy() -> SchedulingPolicy:
    # Thursday; wide capacity so only the rule under test bites
    return SchedulingPolicy(
        earliest_date=date(2025, 1, 2),
        horizon_date=date(2028, 1, 2),
        max_per_day=100,
        max_per_week=500,
        resolve_blackout=no_blackout,
    )


def make_unit(unit_id: str, zip_code: int = 10001, dates=(), **kwargs) -> Unit:
    events = [d if isinstance(d, ScheduleEvent) else ScheduleEvent(date=d) for d in dates]
    kwargs.setdefault("address", f"{unit_id} Main St")
    kwargs.setdefault("city", "Springfield")
    kwargs.setdefault("state", "IL")
    return Unit(unit_id=unit_id, zip_code=zip_code, events=events, **kwargs)


@pytest.fixture
def unit_factory():
    return make_unit
