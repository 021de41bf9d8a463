"""
Declarative column schema shared by import and export.

Each FieldSpec ties one external column title to one internal field, with
its value kind, whether a blank cell is acceptable, and which record it
belongs to. The importer and both exporters read these lists; neither
direction keeps its own column mapping.
"""

import re
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class CsvType(str, Enum):
    """Import mode; decides which optional column families are recognized."""
    BASE = "base"
    TENANTS = "tenants"
    SCHEDULES = "schedules"
    LAST_INSPECTION = "last_inspection"


class FieldKind(str, Enum):
    STR = "str"
    INT = "int"
    DATE = "date"


class FieldRole(str, Enum):
    UNIT = "unit"
    EVENT = "event"
    TENANT = "tenant"


class FieldSpec(BaseModel):
    title: str = Field(description="Column header in the delimited file")
    field: str = Field(description="Attribute name on the internal record")
    kind: FieldKind = Field(default=FieldKind.STR)
    optional: bool = Field(default=False, description="Blank cells map to None instead of the no-data marker")
    role: FieldRole = Field(default=FieldRole.UNIT)


UNIT_FIELDS: List[FieldSpec] = [
    FieldSpec(title="Property Street Address 1", field="address"),
    FieldSpec(title="Property City", field="city"),
    FieldSpec(title="Property State", field="state"),
    FieldSpec(title="Property Zip", field="zip_code", kind=FieldKind.INT),
    FieldSpec(title="Unit", field="unit_label", optional=True),
    FieldSpec(title="Lease From", field="lease_start", kind=FieldKind.DATE, optional=True),
    FieldSpec(title="Lease To", field="lease_end", kind=FieldKind.DATE, optional=True),
    FieldSpec(title="Move-out", field="move_out_date", kind=FieldKind.DATE, optional=True),
]

TENANT_FIELDS: List[FieldSpec] = [
    FieldSpec(title="Tenant", field="name", optional=True, role=FieldRole.TENANT),
    FieldSpec(title="Phone Numbers", field="phone", optional=True, role=FieldRole.TENANT),
    FieldSpec(title="Emails", field="email", optional=True, role=FieldRole.TENANT),
]

# One-inspection-per-row export: event columns wrap the unit columns
EVENT_ROW_FIELDS: List[FieldSpec] = (
    [
        FieldSpec(title="Inspection Date", field="date", kind=FieldKind.DATE, role=FieldRole.EVENT),
        FieldSpec(title="Inspection Number", field="number", kind=FieldKind.INT, role=FieldRole.EVENT),
    ]
    + UNIT_FIELDS
    + [FieldSpec(title="Inspection Type", field="type", role=FieldRole.EVENT)]
)

INSPECTION_PREFIX = "Inspection "
INSPECTION_COLUMN = re.compile(r"^Inspection \d+$")

FIRST_COLUMN = UNIT_FIELDS[0].title

UNIT_COLUMNS: Dict[str, FieldSpec] = {f.title: f for f in UNIT_FIELDS}
TENANT_COLUMNS: Dict[str, FieldSpec] = {f.title: f for f in TENANT_FIELDS}


def inspection_title(n: int) -> str:
    """Column title for the n-th (1-based) inspection."""
    return f"{INSPECTION_PREFIX}{n}"


def is_inspection_column(title: str) -> bool:
    return bool(INSPECTION_COLUMN.match(str(title)))


def accepts_inspections(mode: CsvType) -> bool:
    return mode in (CsvType.SCHEDULES, CsvType.LAST_INSPECTION)


def accepts_tenants(mode: CsvType) -> bool:
    return mode == CsvType.TENANTS


def is_strict(mode: CsvType) -> bool:
    """Strict modes reject columns they do not know instead of passing them through."""
    return mode in (CsvType.SCHEDULES, CsvType.LAST_INSPECTION)


def lookup(title: str) -> Optional[FieldSpec]:
    return UNIT_COLUMNS.get(title)
