"""
Unit and Tenant data models for the Lease Inspection Scheduler.
"""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field, ConfigDict
from datetime import date

from .schedule import ScheduleEvent


class TenantRecord(BaseModel):
    """A tenant living in a unit. Carried through for export only."""
    tenant_id: str = Field(description="Identifier assigned by the import step")
    name: str = Field(default="", description="Tenant name (rows with a blank name are rejected on merge)")
    phone: Optional[str] = Field(default=None, description="Phone number(s) as imported")
    email: Optional[str] = Field(default=None, description="Email address(es) as imported")


class Unit(BaseModel):
    """
    A leased unit whose inspection schedule is being computed.
    Address fields double as the natural key used by history reconciliation.
    """

    # --- Core Identity ---
    unit_id: str = Field(description="Stable identifier assigned by the import step")
    address: str = Field(description="Street address (natural key component)")
    city: Optional[str] = Field(default=None)
    state: Optional[str] = Field(default=None)
    zip_code: Optional[int] = Field(default=None, description="Postal code, used for locality grouping")
    unit_label: Optional[str] = Field(
        default=None,
        description="Disambiguates several units sharing one address"
    )

    # --- Lease Window ---
    lease_start: Optional[date] = Field(default=None, description="Lease start / move-in")
    lease_end: Optional[date] = Field(default=None, description="Contractual lease end")
    move_out_date: Optional[date] = Field(
        default=None,
        description="Actual move-out; overrides lease_end as the end of occupancy"
    )

    # --- Scheduling Output ---
    status_message: Optional[str] = Field(
        default=None,
        description="Explanation set by the generator (e.g. 'Unoccupied', 'Term ended')"
    )
    events: List[ScheduleEvent] = Field(default_factory=list)

    # --- Passthrough ---
    tenants: List[TenantRecord] = Field(default_factory=list)
    extra: Dict[str, str] = Field(
        default_factory=dict,
        description="Unrecognized import columns, preserved for re-export"
    )

    @property
    def effective_end(self) -> Optional[date]:
        """The true end of occupancy: move-out if known, else lease end."""
        return self.move_out_date or self.lease_end

    def describe(self) -> str:
        """Short human label used in log lines."""
        label = f"{self.unit_id} {self.address}"
        if self.unit_label:
            label += f" #{self.unit_label}"
        return label

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "unit_id": "12",
            "address": "100 Main St",
            "city": "Springfield",
            "state": "IL",
            "zip_code": 62701,
            "unit_label": "2B",
            "lease_start": "2024-03-01",
            "lease_end": "2025-02-28",
            "events": [{"date": "2024-06-03", "is_historical": True}],
            "tenants": [{"tenant_id": "12", "name": "Jane Doe", "phone": "555-0100"}]
        }
    })
