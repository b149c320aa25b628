"""
Repository interfaces for the domain layer.
Implementations live in app.infrastructure.repositories.
"""

from .time_entry_repository import TimeEntryRepository
from .billable_rate_repository import BillableRateRepository
from .settings_repository import SettingsRepository
from .task_repository import TaskRepository

__all__ = [
    "TimeEntryRepository",
    "BillableRateRepository",
    "SettingsRepository",
    "TaskRepository",
]
