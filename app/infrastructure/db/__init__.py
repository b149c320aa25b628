"""
Database infrastructure for the time tracking service.
"""

from .database import engine, SessionLocal, get_db, Base, create_tables, drop_tables
from .models import TaskModel, TimeEntryModel, BillableRateModel, TimeTrackingSettingsModel

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "create_tables",
    "drop_tables",
    "TaskModel",
    "TimeEntryModel",
    "BillableRateModel",
    "TimeTrackingSettingsModel",
]
