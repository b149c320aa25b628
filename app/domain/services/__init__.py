"""
Domain services for time tracking and billing.
This module exports all domain services for complex business logic.
"""

from .duration_rounder import round_duration
from .rate_resolver import RateResolver, PRECEDENCE
from .settings_service import SettingsService
from .time_entry_service import TimeEntryService
from .summary_service import SummaryService
from .billing_service import BillingService, round_currency

__all__ = [
    "round_duration",
    "RateResolver",
    "PRECEDENCE",
    "SettingsService",
    "TimeEntryService",
    "SummaryService",
    "BillingService",
    "round_currency",
]
