"""
Scheduling Policy models for the Lease Inspection Scheduler.

This module defines the 'Supply' side of the scheduler:
1. Time bounds (earliest date, horizon)
2. Lease buffers (how close to move-in / move-out inspections may fall)
3. Capacity (per day, per week) and blackout days
"""

from typing import Callable, List, Optional
from pydantic import BaseModel, Field, model_validator, ConfigDict
from datetime import date, timedelta

from config import (
    DEFAULT_MAX_PER_DAY,
    DEFAULT_MAX_PER_WEEK,
    DEFAULT_HORIZON_YEARS,
    DEFAULT_MOVE_IN_MONTHS,
    DEFAULT_MOVE_OUT_MONTHS,
    MAX_REPAIR_ITERATIONS,
)
from scheduler.dates import add_months, add_years

DateShift = Callable[[date], date]


def months_after(months: int) -> DateShift:
    """Buffer that pushes a date forward by whole calendar months."""
    def shift(d: date) -> date:
        return add_months(d, months)
    return shift


def months_before(months: int) -> DateShift:
    """Buffer that pulls a date back by whole calendar months."""
    def shift(d: date) -> date:
        return add_months(d, -months)
    return shift


def no_blackout(d: date) -> date:
    return d


def weekend_blackout(d: date) -> date:
    """Saturdays and Sundays roll forward to Monday."""
    while d.weekday() >= 5:
        d += timedelta(days=1)
    return d


class BlackoutCalendar(BaseModel):
    """
    Callable blackout resolver: weekends (optionally) plus explicit closed dates.
    Always rolls forward, so it is idempotent and terminates for any finite closed set.
    """
    closed_dates: List[date] = Field(default_factory=list, description="Holidays and custom closures")
    skip_weekends: bool = Field(default=True)

    def is_open(self, d: date) -> bool:
        if self.skip_weekends and d.weekday() >= 5:
            return False
        return d not in self.closed_dates

    def __call__(self, d: date) -> date:
        while not self.is_open(d):
            d += timedelta(days=1)
        return d


class SchedulingPolicy(BaseModel):
    """
    Caller-supplied configuration. The engine reads it and never mutates it.
    """

    # --- Time Bounds ---
    earliest_date: date = Field(
        default_factory=lambda: date.today() + timedelta(days=1),
        description="No event is generated before this date (default: tomorrow)"
    )
    horizon_date: Optional[date] = Field(
        default=None,
        description="Hard upper bound for events (default: earliest_date + 3 years)"
    )

    # --- Lease Buffers ---
    move_in_buffer: DateShift = Field(
        default=months_after(DEFAULT_MOVE_IN_MONTHS),
        description="Maps lease start to the first date an inspection may occur"
    )
    move_out_buffer: DateShift = Field(
        default=months_before(DEFAULT_MOVE_OUT_MONTHS),
        description="Maps end of occupancy to the last date a periodic inspection may occur"
    )

    # --- Capacity (global, inclusive) ---
    max_per_day: int = Field(default=DEFAULT_MAX_PER_DAY, ge=1)
    max_per_week: int = Field(default=DEFAULT_MAX_PER_WEEK, ge=1)

    # --- Blackouts ---
    resolve_blackout: DateShift = Field(
        default=weekend_blackout,
        description="Returns the date itself if open, else the next permissible date. Must be idempotent."
    )

    max_iterations: int = Field(
        default=MAX_REPAIR_ITERATIONS,
        ge=1,
        description="Safety bound on repair-loop steps"
    )

    @model_validator(mode='after')
    def validate_horizon(self):
        if self.horizon_date is None:
            self.horizon_date = add_years(self.earliest_date, DEFAULT_HORIZON_YEARS)
        if self.horizon_date < self.earliest_date:
            raise ValueError("Horizon date cannot be before the earliest date")
        return self

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "earliest_date": "2025-01-02",
            "horizon_date": "2028-01-02",
            "max_per_day": 5,
            "max_per_week": 20
        }
    })
