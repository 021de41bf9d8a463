"""
Main Execution Script for the Lease Inspection Scheduler.

Reads the unit list (plus optional history snapshots), builds the schedule
and writes both export shapes.
"""

import argparse
import json
import logging
import sys
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from config import DEFAULT_MOVE_IN_MONTHS, DEFAULT_MOVE_OUT_MONTHS
from models import (
    SchedulingPolicy,
    BlackoutCalendar,
    Unit,
    months_after,
    months_before,
)
from scheduler.engine import build_schedule
from scheduler.reconcile import reconcile
from tabular import CsvType, FileContentError, FileReadingError, load_units, units_to_csv, events_to_csv

logger = logging.getLogger("Main")


def _parse_iso(value: Optional[str]) -> Optional[date]:
    return datetime.strptime(value, "%Y-%m-%d").date() if value else None


def load_policy_file(filename: Optional[str], **overrides: Any) -> SchedulingPolicy:
    """
    Build a SchedulingPolicy from a JSON file, with command-line overrides on top.

    Recognized keys: earliest_date, horizon_date (YYYY-MM-DD), max_per_day,
    max_per_week, move_in_months, move_out_months, skip_weekends,
    closed_dates (list of YYYY-MM-DD).
    """
    data: Dict[str, Any] = {}
    if filename:
        try:
            with open(filename, 'r') as f:
                data = json.load(f)
            logger.info(f"📂 Loaded policy from {filename}")
        except (FileNotFoundError, json.JSONDecodeError) as e:
            raise FileReadingError(f"Policy file {filename} not found or invalid: {e}")

    data.update({k: v for k, v in overrides.items() if v is not None})

    kwargs: Dict[str, Any] = {
        "move_in_buffer": months_after(int(data.get("move_in_months", DEFAULT_MOVE_IN_MONTHS))),
        "move_out_buffer": months_before(int(data.get("move_out_months", DEFAULT_MOVE_OUT_MONTHS))),
        "resolve_blackout": BlackoutCalendar(
            closed_dates=[_parse_iso(d) for d in data.get("closed_dates", [])],
            skip_weekends=bool(data.get("skip_weekends", True)),
        ),
    }
    for key in ("earliest_date", "horizon_date"):
        if data.get(key):
            kwargs[key] = _parse_iso(data[key])
    for key in ("max_per_day", "max_per_week"):
        if data.get(key) is not None:
            kwargs[key] = int(data[key])

    return SchedulingPolicy(**kwargs)


def load_inputs(args: argparse.Namespace) -> List[Unit]:
    """
    Base units, reconciled with whichever history snapshots were given.
    The prior schedule is merged before truncation so the last-inspection
    cutoff applies to it.
    """
    base = load_units(args.units, CsvType.BASE)
    prior = load_units(args.prior, CsvType.SCHEDULES) if args.prior else None
    tenants = load_units(args.tenants, CsvType.TENANTS) if args.tenants else None
    last = load_units(args.last_inspection, CsvType.LAST_INSPECTION) if args.last_inspection else None
    return reconcile(base, schedules=prior, tenants=tenants, last_inspections=last)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Schedule quarterly inspections for leased units.")
    parser.add_argument("units", help="CSV of units (address, lease dates, ...)")
    parser.add_argument("--prior", help="CSV of a previous schedule (Inspection N columns)")
    parser.add_argument("--tenants", help="CSV of tenant details")
    parser.add_argument("--last-inspection", help="CSV with each unit's last completed inspection")
    parser.add_argument("--policy", help="JSON policy file")
    parser.add_argument("--earliest", help="Earliest inspection date, YYYY-MM-DD (default: tomorrow)")
    parser.add_argument("--horizon", help="Last schedulable date, YYYY-MM-DD (default: earliest + 3 years)")
    parser.add_argument("--max-per-day", type=int)
    parser.add_argument("--max-per-week", type=int)
    parser.add_argument("--out-units", default="schedule_by_unit.csv")
    parser.add_argument("--out-events", default="schedule_by_inspection.csv")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every scheduling decision")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # --- PHASE 1: INPUTS ---
    try:
        policy = load_policy_file(
            args.policy,
            earliest_date=args.earliest,
            horizon_date=args.horizon,
            max_per_day=args.max_per_day,
            max_per_week=args.max_per_week,
        )
        units = load_inputs(args)
    except (FileReadingError, FileContentError, ValidationError, ValueError) as e:
        logger.error(f"❌ {e}")
        return 1

    # --- PHASE 2: SCHEDULING ---
    result = build_schedule(units, policy)
    if not result.ok:
        logger.error(f"❌ {result.error}")
        return 2

    # --- PHASE 3: REPORTING ---
    stats = result.get_statistics()
    logger.info(f"📊 {stats['total_events']} inspections for {stats['scheduled_units']}/{stats['units']} units")
    for unit_id, message in stats["unscheduled"].items():
        logger.info(f"   unit {unit_id}: {message}")

    # --- PHASE 4: EXPORT ---
    units_to_csv(result.units, args.out_units)
    events_to_csv(result.units, args.out_events)
    logger.info(f"✅ Wrote {args.out_units} and {args.out_events}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
