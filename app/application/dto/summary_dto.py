"""
Reporting and billing DTOs: summaries and invoice line items.
"""

from typing import List, Literal, Optional
from datetime import datetime
from pydantic import Field

from app.domain.models.invoice import InvoiceLineItem
from app.domain.models.summary import TimeTrackingSummary, SummaryGroupBy
from .base_dto import RequestDTO, ResponseDTO
from .time_entry_dto import TimeEntryResponseDTO


class SummaryResponseDTO(ResponseDTO):
    user_id: str
    group_by: SummaryGroupBy
    group_key: str
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    period_start: datetime
    period_end: datetime
    total_duration: int
    billable_duration: int
    non_billable_duration: int
    billable_amount: float
    currency: str
    entries: List[TimeEntryResponseDTO]

    @classmethod
    def from_domain(cls, summary: TimeTrackingSummary) -> "SummaryResponseDTO":
        return cls.model_validate(summary)


class LineItemsRequestDTO(RequestDTO):
    """Build invoice line items from the caller's entries."""

    entry_ids: List[str] = Field(min_length=1)
    group_by: Literal["project", "task", "none"] = "project"


class LineItemResponseDTO(ResponseDTO):
    description: str
    quantity: float = Field(description="Hours")
    rate: float
    amount: float
    unit: str
    time_entry_ids: List[str]

    @classmethod
    def from_domain(cls, item: InvoiceLineItem) -> "LineItemResponseDTO":
        return cls.model_validate(item)
