from __future__ import annotations

import io
import json
from datetime import date

import pandas as pd
import pytest

from config import NO_DATA
from models import ScheduleEvent, TenantRecord
from run_scheduler import load_policy_file
from tabular import CsvType, FileContentError, load_units, units_to_csv, events_to_csv
from tabular.exporter import render_tenants
from tabular.schema import TENANT_FIELDS, UNIT_FIELDS

HEADER = "Property Street Address 1,Property City,Property State,Property Zip,Unit,Lease From,Lease To,Owner"


def _csv(*lines: str) -> io.StringIO:
    return io.StringIO("\n".join(lines) + "\n")


def _read_back(text: str) -> pd.DataFrame:
    return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)


def test_base_import_types_and_passthrough():
    units = load_units(_csv(
        HEADER,
        "100 Main St,Springfield,IL,62701,2B,03/01/2024,02/28/2025,Acme",
        ",,,,,,,",
        "200 Oak Ave,,IL,62702-1234,,06/15/2024,,",
        "Total,,,,,,,",
    ))

    assert [u.unit_id for u in units] == ["1", "3"]
    first, second = units
    assert first.zip_code == 62701
    assert first.unit_label == "2B"
    assert first.lease_start == date(2024, 3, 1)
    assert first.lease_end == date(2025, 2, 28)
    assert first.move_out_date is None
    assert first.extra == {"Owner": "Acme"}

    assert second.zip_code == 62702
    assert second.city == NO_DATA
    assert second.unit_label is None
    assert second.lease_end is None


@pytest.mark.parametrize("row", [
    "100 Main St,Springfield,IL,abc,,03/01/2024,,",
    "100 Main St,Springfield,IL,,,03/01/2024,,",
    "100 Main St,Springfield,IL,62701,,2024-03-01,,",
])
def test_bad_cells_abort_the_import(row):
    with pytest.raises(FileContentError):
        load_units(_csv(HEADER, row))


def test_lease_ending_before_it_starts_still_imports():
    units = load_units(_csv(
        HEADER,
        "100 Main St,Springfield,IL,62701,,03/01/2024,02/28/2025,",
        "200 Oak Ave,Springfield,IL,62702,,06/01/2024,05/31/2024,",
    ))
    assert len(units) == 2
    assert units[1].lease_start == date(2024, 6, 1)
    assert units[1].lease_end == date(2024, 5, 31)


def test_empty_file_is_a_content_error():
    with pytest.raises(FileContentError):
        load_units(io.StringIO(""))


def test_schedule_import_reads_inspection_columns():
    units = load_units(_csv(
        "Property Street Address 1,Property City,Property State,Property Zip,Lease From,Inspection 1,Inspection 2,Inspection 3",
        "100 Main St,Springfield,IL,62701,01/01/2024,07/01/2024,04/01/2024,",
    ), CsvType.SCHEDULES)

    events = units[0].events
    assert [e.date for e in events] == [date(2024, 4, 1), date(2024, 7, 1)]
    assert all(e.is_historical for e in events)


def test_strict_modes_reject_unknown_columns():
    with pytest.raises(FileContentError, match="Owner"):
        load_units(_csv(HEADER, "100 Main St,Springfield,IL,62701,,,,Acme"), CsvType.SCHEDULES)


def test_inspection_columns_are_passthrough_in_base_mode():
    units = load_units(_csv(
        "Property Street Address 1,Property City,Property State,Property Zip,Inspection 1",
        "100 Main St,Springfield,IL,62701,07/01/2024",
    ))
    assert units[0].events == []
    assert units[0].extra == {"Inspection 1": "07/01/2024"}


def test_tenant_columns_depend_on_mode():
    lines = (
        "Property Street Address 1,Property City,Property State,Property Zip,Tenant,Phone Numbers,Emails",
        "100 Main St,Springfield,IL,62701,Ann Lee,555-0100,",
    )
    tenants = load_units(_csv(*lines), CsvType.TENANTS)[0].tenants
    assert len(tenants) == 1
    assert (tenants[0].name, tenants[0].phone, tenants[0].email) == ("Ann Lee", "555-0100", None)

    base = load_units(_csv(*lines))[0]
    assert base.tenants == []
    assert base.extra["Tenant"] == "Ann Lee"


def test_units_export_columns(unit_factory):
    units = [
        unit_factory("1", address="100 Main St", dates=[date(2025, 1, 2), date(2025, 4, 2)],
                     lease_start=date(2024, 1, 2), extra={"Owner": "Acme"}),
        unit_factory("2", address="200 Oak Ave", unit_label="B"),
    ]
    df = _read_back(units_to_csv(units))

    assert list(df.columns) == [f.title for f in UNIT_FIELDS] + ["Owner", "Inspection 1", "Inspection 2"]
    assert df.loc[0, "Inspection 2"] == "04/02/2025"
    assert df.loc[0, "Lease From"] == "01/02/2024"
    assert df.loc[0, "Property Zip"] == "10001"
    assert df.loc[1, "Inspection 1"] == ""
    assert df.loc[1, "Unit"] == "B"
    assert df.loc[1, "Owner"] == ""


def test_exported_units_import_as_schedule(unit_factory):
    units = [unit_factory("1", address="100 Main St", dates=[date(2025, 1, 2), date(2025, 4, 2)],
                          lease_start=date(2024, 1, 2))]
    back = load_units(io.StringIO(units_to_csv(units)), CsvType.SCHEDULES)
    assert [e.date for e in back[0].events] == [date(2025, 1, 2), date(2025, 4, 2)]
    assert back[0].lease_start == date(2024, 1, 2)


def test_events_export_sorted_with_types_and_tenants(unit_factory):
    tenants = [TenantRecord(tenant_id="1", name="Ann", phone="555"), TenantRecord(tenant_id="2", name="Bob")]
    units = [
        unit_factory("1", address="B St", tenants=tenants, dates=[
            ScheduleEvent(date=date(2024, 10, 1), is_historical=True),
            date(2025, 1, 6),
        ]),
        unit_factory("2", address="A St", dates=[
            ScheduleEvent(date=date(2025, 1, 6), is_urgent=True),
            ScheduleEvent(date=date(2025, 3, 2), is_move_out=True),
        ]),
    ]
    df = _read_back(events_to_csv(units))

    assert list(df["Inspection Date"]) == ["10/01/2024", "01/06/2025", "01/06/2025", "03/02/2025"]
    assert list(df["Property Street Address 1"]) == ["B St", "A St", "B St", "A St"]
    assert list(df["Inspection Type"]) == ["Historical", "Urgent", "Quarterly", "Move-out"]
    assert list(df["Inspection Number"]) == ["1", "1", "2", "2"]
    assert df.loc[0, "Tenant"] == "[1] Ann [2] Bob"
    assert df.loc[1, "Tenant"] == ""


def test_render_tenants_leaves_blank_attributes_empty(unit_factory):
    unit = unit_factory("1", tenants=[TenantRecord(tenant_id="1", name="Ann", phone="555"),
                                      TenantRecord(tenant_id="2", name="Bob")])
    phone = next(f for f in TENANT_FIELDS if f.field == "phone")
    assert render_tenants(unit, phone) == "[1] 555 [2]"


def test_policy_file_with_overrides(tmp_path):
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({
        "earliest_date": "2025-01-02",
        "max_per_day": 3,
        "move_in_months": 2,
        "closed_dates": ["2025-01-03"],
    }))

    policy = load_policy_file(str(path), max_per_day=7, horizon_date=None)

    assert policy.earliest_date == date(2025, 1, 2)
    assert policy.horizon_date == date(2028, 1, 2)
    assert policy.max_per_day == 7
    assert policy.move_in_buffer(date(2025, 1, 31)) == date(2025, 3, 31)
    # Friday is closed, then the weekend
    assert policy.resolve_blackout(date(2025, 1, 3)) == date(2025, 1, 6)
