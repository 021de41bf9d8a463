"""
Delimited-text import of unit lists.

Reads a CSV export from the property-management system and turns each data
row into a Unit. Depending on the mode the same file layout may also carry
tenant columns or numbered "Inspection N" columns. Any problem aborts the
whole import; a partial unit list is never returned.
"""

import logging
import re
from datetime import datetime, date
from typing import Dict, IO, List, Optional, Union
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from config import DATE_FORMAT, NO_DATA, TOTAL_ROW_MARKER
from models import Unit, ScheduleEvent, TenantRecord
from .errors import FileContentError, FileReadingError
from .schema import (
    CsvType,
    FieldKind,
    FieldSpec,
    FIRST_COLUMN,
    TENANT_COLUMNS,
    accepts_inspections,
    accepts_tenants,
    is_inspection_column,
    is_strict,
    lookup,
)

logger = logging.getLogger(__name__)

LEADING_INT = re.compile(r"^[+-]?\d+")

Source = Union[str, Path, IO]


def read_table(path_or_buffer: Source) -> pd.DataFrame:
    """Load every cell as text; blank cells become empty strings."""
    try:
        df = pd.read_csv(path_or_buffer, dtype=str, keep_default_na=False, skip_blank_lines=False)
    except pd.errors.EmptyDataError:
        raise FileContentError("Input file is empty")
    except pd.errors.ParserError as e:
        raise FileContentError(f"Malformed input file: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadingError(f"Error reading input file: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    return df.fillna("")


def parse_date(raw: str, column: str, line: int) -> date:
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        raise FileContentError(f"Invalid date '{raw}' for column '{column}' in row {line + 1}")


def convert(spec: FieldSpec, raw: str, line: int):
    """Typed value for one schema cell."""
    if not raw:
        if spec.optional:
            return None
        if spec.kind == FieldKind.INT:
            raise FileContentError(f"Invalid data '' for column '{spec.title}' in row {line + 1}")
        return NO_DATA

    if spec.kind == FieldKind.DATE:
        return parse_date(raw, spec.title, line)
    if spec.kind == FieldKind.INT:
        m = LEADING_INT.match(raw)
        if not m:
            raise FileContentError(f"Invalid data '{raw}' for column '{spec.title}' in row {line + 1}")
        return int(m.group(0))
    return raw


def check_columns(columns: List[str], mode: CsvType) -> None:
    """Strict modes accept only schema and inspection columns."""
    if not is_strict(mode):
        return
    for title in columns:
        if lookup(title) is None and not is_inspection_column(title):
            raise FileContentError(f"Unhandled column in input file: {title}")


def parse_row(values: Dict[str, str], line: int, mode: CsvType) -> Unit:
    fields = {"unit_id": str(line)}
    events: List[ScheduleEvent] = []
    tenant: Dict[str, Optional[str]] = {}
    extra: Dict[str, str] = {}

    for title, raw in values.items():
        spec = lookup(title)
        if spec is not None:
            fields[spec.field] = convert(spec, raw, line)
        elif accepts_inspections(mode) and is_inspection_column(title):
            if raw:
                events.append(ScheduleEvent(date=parse_date(raw, title, line), is_historical=True))
        elif accepts_tenants(mode) and title in TENANT_COLUMNS:
            tenant[TENANT_COLUMNS[title].field] = raw or None
        else:
            extra[title] = raw

    fields.setdefault("address", NO_DATA)

    # Inspections may be out of order in the input file
    events.sort(key=lambda e: e.date)
    tenants = []
    if tenant:
        tenants.append(TenantRecord(
            tenant_id=str(line),
            name=tenant.get("name") or "",
            phone=tenant.get("phone"),
            email=tenant.get("email"),
        ))

    try:
        return Unit(**fields, events=events, tenants=tenants, extra=extra)
    except ValidationError as e:
        raise FileContentError(f"Invalid row {line + 1}: {e.errors()[0]['msg']}")


def load_units(path_or_buffer: Source, mode: CsvType = CsvType.BASE) -> List[Unit]:
    """
    Parse a CSV of units, which may or may not include previous schedule and tenant information.
    Row numbers count data rows from 1 and double as the synthetic unit_id.
    """
    df = read_table(path_or_buffer)
    check_columns(list(df.columns), mode)

    units: List[Unit] = []
    for line, row in enumerate(df.to_dict(orient="records"), start=1):
        values = {k: str(v).strip() for k, v in row.items()}

        if all(not v for v in values.values()):
            logger.debug(f"Skipping empty line {line + 1}")
            continue
        if values.get(FIRST_COLUMN) == TOTAL_ROW_MARKER:
            logger.debug(f"Skipping '{TOTAL_ROW_MARKER}' row {line + 1}")
            continue

        units.append(parse_row(values, line, mode))

    with_events = sum(1 for u in units if u.events)
    logger.info(f"Parsed {len(units)} units ({mode.value})" + (f", {with_events} with schedules" if with_events else ""))
    return units
