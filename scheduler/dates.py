"""
Calendar arithmetic shared by the generator, the constraint engine and the policy defaults.
"""

from datetime import date as date_type, timedelta
from typing import Tuple

import pandas as pd

from config import INSPECTION_PERIOD_MONTHS, GAP_FACTOR, DAYS_PER_MONTH


def add_months(d: date_type, months: int) -> date_type:
    """Calendar-month offset; the day clamps to the end of shorter months (Jan 31 + 1 -> Feb 28)."""
    return (pd.Timestamp(d) + pd.DateOffset(months=months)).date()


def add_days(d: date_type, days: int) -> date_type:
    return d + timedelta(days=days)


def add_years(d: date_type, years: int) -> date_type:
    return add_months(d, 12 * years)


def iso_week(d: date_type) -> Tuple[int, int]:
    """(ISO year, ISO week) so that week 1 of next year never collides with week 1 of this one."""
    iso = d.isocalendar()
    return iso[0], iso[1]


def max_gap_hours() -> float:
    # Fractional months cannot be added to a date, so the threshold is expressed in hours
    return INSPECTION_PERIOD_MONTHS * GAP_FACTOR * DAYS_PER_MONTH * 24


def hours_between(start: date_type, end: date_type) -> int:
    return (end - start).days * 24


def midpoint(start: date_type, end: date_type) -> date_type:
    """Middle of a gap, floored to the day."""
    return start + timedelta(days=(end - start).days // 2)
