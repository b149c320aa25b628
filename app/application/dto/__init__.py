"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import BaseDTO, RequestDTO, ResponseDTO, PaginatedResponseDTO
from .time_entry_dto import (
    StartTimerRequestDTO,
    StopTimerRequestDTO,
    CreateTimeEntryRequestDTO,
    UpdateTimeEntryRequestDTO,
    MarkInvoicedRequestDTO,
    UnlinkInvoiceRequestDTO,
    TimeEntryResponseDTO,
    TimeEntryListResponseDTO,
    UnlinkInvoiceResponseDTO,
)
from .settings_dto import UpdateSettingsRequestDTO, SettingsResponseDTO, WorkingDayDTO
from .rate_dto import CreateRateRequestDTO, RateResponseDTO
from .summary_dto import SummaryResponseDTO, LineItemsRequestDTO, LineItemResponseDTO

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "PaginatedResponseDTO",

    # Time entries
    "StartTimerRequestDTO",
    "StopTimerRequestDTO",
    "CreateTimeEntryRequestDTO",
    "UpdateTimeEntryRequestDTO",
    "MarkInvoicedRequestDTO",
    "UnlinkInvoiceRequestDTO",
    "TimeEntryResponseDTO",
    "TimeEntryListResponseDTO",
    "UnlinkInvoiceResponseDTO",

    # Settings
    "UpdateSettingsRequestDTO",
    "SettingsResponseDTO",
    "WorkingDayDTO",

    # Rates
    "CreateRateRequestDTO",
    "RateResponseDTO",

    # Reporting and billing
    "SummaryResponseDTO",
    "LineItemsRequestDTO",
    "LineItemResponseDTO",
]
