"""
Delimited-text export of scheduled units.

Two shapes are produced from the same schema used on import:
1. One row per unit, inspections as consecutive "Inspection N" columns.
2. One row per inspection, sorted by date then address, with tenants.
"""

import logging
from datetime import date
from typing import Any, Dict, IO, List, Optional, Union
from pathlib import Path

import pandas as pd

from config import DATE_FORMAT
from models import Unit
from .schema import (
    EVENT_ROW_FIELDS,
    FieldKind,
    FieldRole,
    FieldSpec,
    TENANT_FIELDS,
    UNIT_FIELDS,
    inspection_title,
)

logger = logging.getLogger(__name__)

Target = Union[str, Path, IO, None]


def format_value(spec: FieldSpec, value: Any) -> str:
    if value is None:
        return ""
    if spec.kind == FieldKind.DATE and isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return str(value)


def extra_columns(units: List[Unit]) -> List[str]:
    """Passthrough column names in first-seen order."""
    seen: List[str] = []
    for u in units:
        for k in u.extra:
            if k not in seen:
                seen.append(k)
    return seen


def warn_collisions(natural: List[str], extra: List[str]) -> None:
    for title in natural:
        if title in extra:
            logger.warning(f"Exported unit contains natural field and unexpected/custom imported column: '{title}'")


def write_table(rows: List[Dict[str, str]], columns: List[str], path_or_buffer: Target) -> Optional[str]:
    df = pd.DataFrame(rows, columns=columns).fillna("")
    return df.to_csv(path_or_buffer, index=False, lineterminator="\n")


def units_to_csv(units: List[Unit], path_or_buffer: Target = None) -> Optional[str]:
    """
    Inspection schedule, one unit per row.
    Returns the CSV text when no target is given.
    """
    natural = [f.title for f in UNIT_FIELDS]
    extra = extra_columns(units)
    inspections: List[str] = []

    rows = []
    for u in units:
        row = {f.title: format_value(f, getattr(u, f.field)) for f in UNIT_FIELDS}
        for i, e in enumerate(u.events, start=1):
            title = inspection_title(i)
            row[title] = e.date.strftime(DATE_FORMAT)
            if len(inspections) < i:
                inspections.append(title)
        for k in extra:
            v = u.extra.get(k)
            if v:
                row[k] = v
        rows.append(row)

    warn_collisions(natural + inspections, extra)
    logger.info(f"Exporting {len(rows)} units with up to {len(inspections)} inspections")
    return write_table(rows, natural + extra + inspections, path_or_buffer)


def render_tenants(u: Unit, spec: FieldSpec) -> str:
    """'[1] first [2] second' style concatenation of one tenant attribute."""
    return " ".join(
        f"[{i}] {getattr(t, spec.field) or ''}".rstrip()
        for i, t in enumerate(u.tenants, start=1)
    )


def events_to_csv(units: List[Unit], path_or_buffer: Target = None) -> Optional[str]:
    """
    Inspection schedule, one inspection per row, sorted by date then address.
    Returns the CSV text when no target is given.
    """
    flat = []
    for u in units:
        for i, e in enumerate(u.events, start=1):
            flat.append((u, e, i))
    flat.sort(key=lambda r: (r[1].date, r[0].address))

    natural = [f.title for f in EVENT_ROW_FIELDS]
    tenant_cols = [f.title for f in TENANT_FIELDS]
    extra = extra_columns(units)
    warn_collisions(natural + tenant_cols, extra)

    rows = []
    for u, e, number in flat:
        event_values = {"date": e.date, "number": number, "type": e.kind.value}
        row = {}
        for f in EVENT_ROW_FIELDS:
            value = event_values[f.field] if f.role == FieldRole.EVENT else getattr(u, f.field)
            row[f.title] = format_value(f, value)
        for f in TENANT_FIELDS:
            row[f.title] = render_tenants(u, f)
        for k in extra:
            v = u.extra.get(k)
            if v:
                row[k] = v
        rows.append(row)

    logger.info(f"Exporting {len(rows)} inspections")
    return write_table(rows, natural + tenant_cols + extra, path_or_buffer)
