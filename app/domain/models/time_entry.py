"""
TimeEntry domain model.
Represents time tracking entries for tasks and projects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
from enum import Enum

from app.domain.models.base import BaseEntity, ValidationError


class TimeEntrySource(str, Enum):
    """How the entry was recorded."""
    TIMER = "timer"
    MANUAL = "manual"


# Fields that stay editable after an entry has been invoiced.
UNLOCKED_FIELDS = frozenset({"description", "tags"})


def normalize_tags(tags: Optional[List[str]]) -> List[str]:
    """Tags behave as a set; keep the first occurrence of each non-blank label."""
    seen = []
    for tag in tags or []:
        label = tag.strip()
        if label and label not in seen:
            seen.append(label)
    return seen


@dataclass(eq=False, kw_only=True)
class TimeEntry(BaseEntity):
    """
    TimeEntry entity.
    A running timer has no end_time and a zero duration; a stopped entry
    carries the rounded duration in seconds.
    """

    user_id: str
    task_id: str
    project_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int = 0
    description: Optional[str] = None
    billable: bool = True
    billable_rate: Optional[float] = None
    invoice_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    source: TimeEntrySource = TimeEntrySource.TIMER

    def __post_init__(self):
        self.tags = normalize_tags(self.tags)
        if isinstance(self.source, str):
            self.source = TimeEntrySource(self.source)

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    @property
    def is_locked(self) -> bool:
        """Entries referenced by an invoice are locked."""
        return self.invoice_id is not None

    @property
    def duration_hours(self) -> float:
        return self.duration / 3600

    @property
    def billable_amount(self) -> float:
        """Amount this entry contributes to an invoice; zero without a rate."""
        if not self.billable or self.billable_rate is None:
            return 0.0
        return self.duration_hours * self.billable_rate

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def stop(self, end_time: datetime, duration: int) -> None:
        """Close a running timer with an already rounded duration."""
        self.end_time = end_time
        self.duration = duration
        self.mark_as_updated()

    def locked_fields(self, changes) -> List[str]:
        """Names among the requested changes that the invoice lock forbids."""
        if not self.is_locked:
            return []
        return sorted(key for key in changes if key not in UNLOCKED_FIELDS)

    def validate(self) -> None:
        if self.end_time is None:
            if self.duration != 0:
                raise ValidationError("A running timer cannot have a duration", "duration")
            return
        if self.end_time <= self.start_time:
            raise ValidationError("End time must be after start time", "end_time")
        if self.duration < 0:
            raise ValidationError("Duration cannot be negative", "duration")
        if self.billable_rate is not None and self.billable_rate < 0:
            raise ValidationError("Billable rate cannot be negative", "billable_rate")
