"""
Time entry mapper for converting between domain entities and database models.
"""

from typing import Any, Dict, Optional

from app.domain.models.base import as_utc
from app.domain.models.time_entry import TimeEntry, TimeEntrySource
from app.infrastructure.db.models import TimeEntryModel


def _to_float(value) -> Optional[float]:
    return float(value) if value is not None else None


class TimeEntryMapper:
    """Maps between TimeEntry domain entity and TimeEntryModel database model."""

    def to_row(self, time_entry: TimeEntry) -> Dict[str, Any]:
        """Column values for inserts and conditional updates."""
        return {
            "user_id": time_entry.user_id,
            "project_id": time_entry.project_id,
            "task_id": time_entry.task_id,
            "description": time_entry.description,
            "start_time": time_entry.start_time,
            "end_time": time_entry.end_time,
            "duration": time_entry.duration,
            "billable": time_entry.billable,
            "billable_rate": time_entry.billable_rate,
            "invoice_id": time_entry.invoice_id,
            "tags": list(time_entry.tags),
            "source": time_entry.source.value,
            "updated_at": time_entry.updated_at,
        }

    def domain_to_model(self, time_entry: TimeEntry) -> TimeEntryModel:
        """Convert TimeEntry domain entity to TimeEntryModel."""
        return TimeEntryModel(
            id=time_entry.id,
            created_at=time_entry.created_at,
            **self.to_row(time_entry),
        )

    def model_to_domain(self, model: TimeEntryModel) -> TimeEntry:
        """Convert TimeEntryModel to TimeEntry domain entity."""
        return TimeEntry(
            id=model.id,
            user_id=model.user_id,
            project_id=model.project_id,
            task_id=model.task_id,
            description=model.description,
            start_time=as_utc(model.start_time),
            end_time=as_utc(model.end_time),
            duration=model.duration or 0,
            billable=model.billable if model.billable is not None else True,
            billable_rate=_to_float(model.billable_rate),
            invoice_id=model.invoice_id,
            tags=list(model.tags or []),
            source=TimeEntrySource(model.source or TimeEntrySource.TIMER.value),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
