"""
Repair-loop State Management.

This module acts as the 'Memory' of the constraint engine:
1. The two-pointer scan position (confirmed prefix vs. cursor).
2. Counters describing what the repair pass changed.
"""

from dataclasses import dataclass, field
from datetime import date as date_type
from typing import Any, Dict, List, Tuple


@dataclass
class RepairState:
    """
    Scan position of the repair loop.

    Every entry before `confirmed` has been checked against the current list
    and is untouched since. `cursor` is the entry being checked now.
    The loop has reached its fixed point once cursor == len(entries).
    """
    confirmed: int = 0
    cursor: int = 0
    iterations: int = 0

    def advance(self) -> None:
        """Entry at the cursor passed every check."""
        self.cursor += 1
        self.confirmed = self.cursor

    def restart(self, touched: int) -> None:
        """
        A mutation happened. `touched` is the lowest list position whose
        entry changed; anything from there on must be checked again.
        """
        self.confirmed = min(self.confirmed, touched)
        self.cursor = self.confirmed


@dataclass
class RepairReport:
    """What the repair pass did, for logging and the final result."""
    iterations: int = 0
    dropped: List[Tuple[str, date_type]] = field(default_factory=list)
    blackout_moves: int = 0
    day_shifts: int = 0
    week_shifts: int = 0
    locked_overflows: int = 0

    @property
    def mutations(self) -> int:
        return len(self.dropped) + self.blackout_moves + self.day_shifts + self.week_shifts

    def record_drop(self, unit_id: str, d: date_type) -> None:
        self.dropped.append((unit_id, d))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "iterations": self.iterations,
            "dropped": len(self.dropped),
            "blackout_moves": self.blackout_moves,
            "day_shifts": self.day_shifts,
            "week_shifts": self.week_shifts,
            "locked_overflows": self.locked_overflows,
        }
