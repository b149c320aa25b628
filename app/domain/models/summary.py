"""
Aggregated time tracking totals. Derived on read, never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from app.domain.models.time_entry import TimeEntry


class SummaryGroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    PROJECT = "project"
    TASK = "task"


@dataclass
class TimeTrackingSummary:
    user_id: str
    group_by: SummaryGroupBy
    group_key: str
    period_start: datetime
    period_end: datetime
    currency: str
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    total_duration: int = 0
    billable_duration: int = 0
    non_billable_duration: int = 0
    billable_amount: float = 0.0
    entries: List[TimeEntry] = field(default_factory=list)

    def add(self, entry: TimeEntry) -> None:
        """Fold one entry into the running totals; the amount is rounded by the caller."""
        self.entries.append(entry)
        self.total_duration += entry.duration
        if entry.billable:
            self.billable_duration += entry.duration
            self.billable_amount += entry.billable_amount
        else:
            self.non_billable_duration += entry.duration
