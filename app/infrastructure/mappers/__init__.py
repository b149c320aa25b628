"""
Mappers for converting between domain entities and database models.
"""

from .time_entry_mapper import TimeEntryMapper
from .billable_rate_mapper import BillableRateMapper
from .settings_mapper import SettingsMapper
from .task_mapper import TaskMapper

__all__ = [
    "TimeEntryMapper",
    "BillableRateMapper",
    "SettingsMapper",
    "TaskMapper",
]
