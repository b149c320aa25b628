"""
Time Entry DTOs for the application layer.
Data Transfer Objects for time tracking operations.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import Field, field_validator

from app.domain.models.time_entry import TimeEntry, TimeEntrySource
from .base_dto import RequestDTO, ResponseDTO, PaginatedResponseDTO


def _blank_to_none(v):
    if v is not None and len(v.strip()) == 0:
        return None
    return v


# Request DTOs
class StartTimerRequestDTO(RequestDTO):
    """DTO for starting a timer."""

    task_id: str = Field(min_length=1, description="Task ID")
    description: Optional[str] = Field(default=None, max_length=500, description="Work description")
    billable: bool = Field(default=True, description="Whether time is billable")
    tags: List[str] = Field(default_factory=list, max_length=20, description="Time entry tags")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _blank_to_none(v)


class StopTimerRequestDTO(RequestDTO):
    """DTO for stopping a timer."""

    time_entry_id: str = Field(min_length=1, description="Running time entry ID")
    end_time: Optional[datetime] = Field(default=None, description="End timestamp, defaults to now")


class CreateTimeEntryRequestDTO(RequestDTO):
    """DTO for manual time entry creation."""

    task_id: str = Field(min_length=1, description="Task ID")
    project_id: str = Field(min_length=1, description="Project ID the task belongs to")
    description: Optional[str] = Field(default=None, max_length=500, description="Work description")
    start_time: datetime = Field(description="Start timestamp")
    end_time: datetime = Field(description="End timestamp")
    duration: Optional[int] = Field(default=None, description="Duration in seconds, overrides the range")
    billable: bool = Field(default=True, description="Whether time is billable")
    billable_rate: Optional[float] = Field(default=None, ge=0, description="Override hourly rate")
    tags: List[str] = Field(default_factory=list, max_length=20, description="Time entry tags")

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        return _blank_to_none(v)


class UpdateTimeEntryRequestDTO(RequestDTO):
    """DTO for time entry updates. Only the fields sent are applied."""

    description: Optional[str] = Field(default=None, max_length=500)
    tags: Optional[List[str]] = Field(default=None, max_length=20)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    billable: Optional[bool] = None
    billable_rate: Optional[float] = Field(default=None, ge=0)
    task_id: Optional[str] = None


class MarkInvoicedRequestDTO(RequestDTO):
    """DTO for locking entries against an invoice."""

    entry_ids: List[str] = Field(min_length=1, description="Entries to lock")
    invoice_id: str = Field(min_length=1, description="Invoice referencing the entries")


class UnlinkInvoiceRequestDTO(RequestDTO):
    invoice_id: str = Field(min_length=1)


# Response DTOs
class TimeEntryResponseDTO(ResponseDTO):
    """DTO for time entry response."""

    id: str
    user_id: str
    task_id: str
    project_id: str
    description: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    billable: bool
    billable_rate: Optional[float] = None
    invoice_id: Optional[str] = None
    tags: List[str]
    source: TimeEntrySource
    is_running: bool
    is_locked: bool
    billable_amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, entry: TimeEntry) -> "TimeEntryResponseDTO":
        return cls.model_validate(entry)


class TimeEntryListResponseDTO(PaginatedResponseDTO[TimeEntryResponseDTO]):
    """DTO for paginated time entry list response."""
    pass


class UnlinkInvoiceResponseDTO(ResponseDTO):
    unlinked: int
