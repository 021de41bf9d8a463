"""
Schedule data models for the Lease Inspection Scheduler.

This module defines the atomic 'Output' of the scheduling engine:
a single inspection date attached to a unit, plus the flags that decide
whether the constraint engine may move or drop it.
"""

from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import date as date_type


class EventKind(str, Enum):
    """Label of a scheduled inspection, as shown in exports."""
    HISTORICAL = "Historical"
    MOVE_OUT = "Move-out"
    URGENT = "Urgent"
    QUARTERLY = "Quarterly"


class ScheduleEvent(BaseModel):
    """
    A candidate or confirmed inspection date for one unit.
    The three flags are independent; an event with none of them set is an
    ordinary inspection that the engine may shift freely.
    """

    date: date_type = Field(description="Calendar date of the inspection")

    # --- Locking Flags ---
    is_historical: bool = Field(
        default=False,
        description="Imported ground truth. Never moved or dropped by the engine."
    )
    is_move_out: bool = Field(
        default=False,
        description="Anchor the day after lease end / move-out. Never moved, only dropped past the horizon."
    )
    is_urgent: bool = Field(
        default=False,
        description="Single forced inspection because the lease term is shorter than the buffer window"
    )

    @property
    def is_locked(self) -> bool:
        """Locked events do not take part in capacity shifting."""
        return self.is_historical or self.is_move_out

    @property
    def kind(self) -> EventKind:
        if self.is_historical:
            return EventKind.HISTORICAL
        if self.is_move_out:
            return EventKind.MOVE_OUT
        if self.is_urgent:
            return EventKind.URGENT
        return EventKind.QUARTERLY

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "date": "2025-01-15",
            "is_historical": False,
            "is_move_out": True,
            "is_urgent": False
        }
    })
