"""
Billable rate DTOs for the application layer.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field, model_validator

from app.domain.models.billable_rate import BillableRate
from .base_dto import RequestDTO, ResponseDTO


class CreateRateRequestDTO(RequestDTO):
    """DTO for rate creation. At least one scope field is required."""

    hourly_rate: float = Field(ge=0, description="Hourly price")
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Za-z]{3}$", description="ISO-4217 code")
    effective_from: Optional[datetime] = Field(default=None, description="Defaults to now")
    effective_to: Optional[datetime] = Field(default=None, description="Open-ended when absent")
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    task_type_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_scope(self):
        if self.user_id is None and self.project_id is None and self.task_type_id is None:
            raise ValueError("A rate must be scoped to at least one of user_id, project_id or task_type_id")
        return self


class RateResponseDTO(ResponseDTO):
    id: str
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    task_type_id: Optional[str] = None
    hourly_rate: float
    currency: str
    effective_from: datetime
    effective_to: Optional[datetime] = None

    @classmethod
    def from_domain(cls, rate: BillableRate) -> "RateResponseDTO":
        return cls.model_validate(rate)
