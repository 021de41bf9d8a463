"""
Tabular import/export for the Lease Inspection Scheduler.

Import and export share one declarative column schema (see schema.py).
"""

from .errors import FileReadingError, FileContentError
from .schema import CsvType, FieldSpec, UNIT_FIELDS, TENANT_FIELDS, EVENT_ROW_FIELDS
from .importer import load_units
from .exporter import units_to_csv, events_to_csv

__all__ = [
    "FileReadingError",
    "FileContentError",
    "CsvType",
    "FieldSpec",
    "UNIT_FIELDS",
    "TENANT_FIELDS",
    "EVENT_ROW_FIELDS",
    "load_units",
    "units_to_csv",
    "events_to_csv",
]
