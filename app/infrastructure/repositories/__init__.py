"""
SQLAlchemy implementations of the domain repository interfaces.
"""

from .time_entry_repository import SQLAlchemyTimeEntryRepository
from .billable_rate_repository import SQLAlchemyBillableRateRepository
from .settings_repository import SQLAlchemySettingsRepository
from .task_repository import SQLAlchemyTaskRepository

__all__ = [
    "SQLAlchemyTimeEntryRepository",
    "SQLAlchemyBillableRateRepository",
    "SQLAlchemySettingsRepository",
    "SQLAlchemyTaskRepository",
]
