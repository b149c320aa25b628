"""
Settings DTOs for the application layer.
"""

from typing import Dict, Optional
from pydantic import Field

from app.domain.models.settings import TimeTrackingSettings
from .base_dto import RequestDTO, ResponseDTO


class WorkingDayDTO(RequestDTO):
    start: Optional[str] = Field(default=None, description="HH:MM")
    end: Optional[str] = Field(default=None, description="HH:MM")
    is_work_day: Optional[bool] = None


class UpdateSettingsRequestDTO(RequestDTO):
    """Partial settings update. user_id is accepted but ignored."""

    user_id: Optional[str] = None
    default_billable_rate: Optional[float] = None
    rounding_interval: Optional[int] = Field(default=None, description="Minutes, 0 disables rounding")
    auto_stop_timer_after_inactivity: Optional[int] = Field(default=None, description="Minutes, 0 disables")
    reminder_interval: Optional[int] = Field(default=None, description="Minutes, 0 disables")
    working_hours: Optional[Dict[str, WorkingDayDTO]] = Field(
        default=None, description="Weekday 0 (Sunday) to 6 mapped to working hours"
    )

    def to_updates(self) -> dict:
        """Only the fields the client sent, without nulls inside working days."""
        updates = self.model_dump(exclude_unset=True, exclude_none=True)
        updates.pop("user_id", None)
        return updates


class WorkingDayResponseDTO(ResponseDTO):
    start: str
    end: str
    is_work_day: bool


class SettingsResponseDTO(ResponseDTO):
    user_id: str
    default_billable_rate: float
    rounding_interval: int
    auto_stop_timer_after_inactivity: int
    reminder_interval: int
    working_hours: Dict[str, WorkingDayResponseDTO]

    @classmethod
    def from_domain(cls, settings: TimeTrackingSettings) -> "SettingsResponseDTO":
        return cls.model_validate(settings)
