from __future__ import annotations

from collections import Counter
from datetime import date, timedelta

from models import ScheduleEvent, weekend_blackout
from scheduler.candidates import UNOCCUPIED, TERM_ENDED
from scheduler.constraints import flatten, repair_schedule
from scheduler.dates import add_months
from scheduler.engine import build_schedule, recombine, ScheduleStatus


def _mixed_units(unit_factory):
    return [
        unit_factory("1", lease_start=date(2024, 1, 2)),
        unit_factory("2"),
        unit_factory("3", lease_start=date(2023, 1, 1), lease_end=date(2024, 12, 31)),
        unit_factory("4", lease_start=date(2025, 1, 1), lease_end=date(2025, 3, 1)),
        unit_factory("5", lease_end=date(2026, 1, 1)),
    ]


def test_output_has_one_unit_per_input_in_input_order(policy, unit_factory):
    units = _mixed_units(unit_factory)
    result = build_schedule(units, policy)

    assert result.ok
    assert [u.unit_id for u in result.units] == ["1", "2", "3", "4", "5"]
    assert result.units[1].status_message == UNOCCUPIED
    assert result.units[1].events == []
    assert result.units[2].status_message == TERM_ENDED


def test_open_lease_scenario(policy, unit_factory):
    result = build_schedule([unit_factory("1", lease_start=date(2024, 1, 2))], policy)
    dates = [e.date for e in result.units[0].events]
    assert dates == [add_months(policy.earliest_date, 3 * i) for i in range(12)]


def test_same_day_overflow_is_spread(policy, unit_factory):
    policy = policy.model_copy(update={"max_per_day": 5})
    units = [
        unit_factory(str(i), zip_code=10001 + i // 5, lease_start=date(2024, 1, 2))
        for i in range(10)
    ]
    result = build_schedule(units, policy)

    per_day = Counter(e.date for u in result.units for e in u.events)
    assert max(per_day.values()) <= 5
    assert per_day[policy.earliest_date] == 5

    # The second zip code moved as a block
    first = {u.unit_id: u.events[0].date for u in result.units}
    assert {first[str(i)] for i in range(5)} == {policy.earliest_date}
    assert {first[str(i)] for i in range(5, 10)} == {policy.earliest_date + timedelta(days=1)}


def test_horizon_and_history_hold_after_repair(policy, unit_factory):
    policy = policy.model_copy(update={"max_per_day": 1, "resolve_blackout": weekend_blackout})
    saturday = date(2024, 11, 2)
    units = [
        unit_factory(
            str(i),
            zip_code=10000 + i,
            lease_start=date(2024, 1, 1),
            lease_end=date(2026, 12, 31),
            dates=[ScheduleEvent(date=saturday, is_historical=True)],
        )
        for i in range(4)
    ]
    result = build_schedule(units, policy)

    for u in result.units:
        historical = [e for e in u.events if e.is_historical]
        assert [e.date for e in historical] == [saturday]
        assert all(e.date <= policy.horizon_date for e in u.events if not e.is_historical)
        assert all(e.date.weekday() < 5 for e in u.events if not e.is_historical)

    per_day = Counter(e.date for u in result.units for e in u.events if not e.is_locked)
    assert max(per_day.values()) <= 1


def test_rerunning_repair_on_output_changes_nothing(policy, unit_factory):
    policy = policy.model_copy(update={"max_per_day": 2, "max_per_week": 6, "resolve_blackout": weekend_blackout})
    units = _mixed_units(unit_factory) + [
        unit_factory(f"x{i}", zip_code=10000 + i % 2, lease_start=date(2024, 1, 2)) for i in range(6)
    ]
    result = build_schedule(units, policy)
    before = [(u.unit_id, [e.date for e in u.events]) for u in result.units]

    entries, report = repair_schedule(flatten(result.units), policy)

    assert report.mutations == 0
    assert [(u.unit_id, [e.date for e in u.events]) for u in recombine(result.units, entries)] == before


def test_prior_schedule_is_kept_as_history(policy, unit_factory):
    base = unit_factory("1", lease_start=date(2024, 1, 1), lease_end=date(2026, 12, 31))
    prior = unit_factory(
        "99",
        address="1 Main St",
        lease_start=date(2024, 1, 1),
        lease_end=date(2026, 12, 31),
        dates=[ScheduleEvent(date=date(2024, 10, 15), is_historical=True)],
    )
    result = build_schedule([base], policy, prior_schedule=[prior])

    events = result.units[0].events
    assert events[0].is_historical and events[0].date == date(2024, 10, 15)
    assert events[1].date == date(2025, 1, 15)


def test_inputs_are_not_mutated(policy, unit_factory):
    units = _mixed_units(unit_factory)
    snapshot = [u.model_dump() for u in units]
    build_schedule(units, policy)
    assert [u.model_dump() for u in units] == snapshot


def test_non_converging_resolver_fails_with_result(policy, unit_factory):
    def flip(d):
        return d + timedelta(days=1) if d.toordinal() % 2 == 0 else d - timedelta(days=1)

    policy = policy.model_copy(update={"resolve_blackout": flip, "max_iterations": 100})
    result = build_schedule([unit_factory("1", lease_start=date(2024, 1, 2))], policy)

    assert result.status == ScheduleStatus.FAILED
    assert not result.ok
    assert "100" in result.error or "101" in result.error
    assert len(result.units) == 1


def test_statistics_summary(policy, unit_factory):
    result = build_schedule(_mixed_units(unit_factory), policy)
    stats = result.get_statistics()

    assert stats["units"] == 5
    assert stats["unscheduled"] == {"2": "Unoccupied", "5": "Missing lease start"}
    assert stats["events_by_kind"]["Urgent"] == 1
    assert stats["events_by_kind"]["Move-out"] == 2
    assert stats["total_events"] == sum(len(u.events) for u in result.units)


def test_units_sharing_an_id_keep_their_own_events(policy, unit_factory):
    units = [
        unit_factory("dup", address="1 Main St", lease_start=date(2024, 1, 2)),
        unit_factory("dup", address="2 Main St", lease_start=date(2023, 1, 1), lease_end=date(2024, 12, 31)),
    ]
    result = build_schedule(units, policy)

    open_lease, ended = result.units
    assert len(open_lease.events) == 12
    assert not any(e.is_move_out for e in open_lease.events)
    assert [e.date for e in ended.events] == [date(2025, 1, 3)]
    assert ended.events[0].is_move_out
