"""
Domain models for the time tracking and billing core.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    ValueObject,
    TimeRange,
    DomainException,
    ValidationError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
    utcnow,
    as_utc,
)

from .time_entry import TimeEntry, TimeEntrySource, UNLOCKED_FIELDS
from .billable_rate import BillableRate
from .settings import TimeTrackingSettings, WorkingDay
from .summary import TimeTrackingSummary, SummaryGroupBy
from .task import TaskRef
from .invoice import InvoiceLineItem

__all__ = [
    # Base classes
    "BaseEntity",
    "ValueObject",
    "TimeRange",
    "DomainException",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "ConflictError",
    "utcnow",
    "as_utc",

    # Time tracking
    "TimeEntry",
    "TimeEntrySource",
    "UNLOCKED_FIELDS",
    "BillableRate",
    "TimeTrackingSettings",
    "WorkingDay",
    "TimeTrackingSummary",
    "SummaryGroupBy",
    "TaskRef",
    "InvoiceLineItem",
]
