"""
Per-user time tracking settings.
"""

import re
from dataclasses import dataclass, field
from typing import Dict

from app.domain.models.base import ValidationError


HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
WEEKDAY_KEYS = tuple(str(day) for day in range(7))

DEFAULT_ROUNDING_INTERVAL = 15
DEFAULT_AUTO_STOP = 30


@dataclass
class WorkingDay:
    start: str = "09:00"
    end: str = "17:00"
    is_work_day: bool = True

    def validate(self, weekday: str) -> None:
        for name, value in (("start", self.start), ("end", self.end)):
            if not isinstance(value, str) or not HHMM_PATTERN.match(value):
                raise ValidationError(
                    f"working_hours[{weekday}].{name} must use HH:MM format",
                    "working_hours",
                )
        # Zero-padded HH:MM strings compare in time order.
        if self.start >= self.end:
            raise ValidationError(
                f"working_hours[{weekday}] start must be before end",
                "working_hours",
            )


def default_working_hours() -> Dict[str, WorkingDay]:
    """Monday to Friday, 09:00 to 17:00; weekday keys follow 0 = Sunday."""
    return {
        key: WorkingDay(is_work_day=key not in ("0", "6"))
        for key in WEEKDAY_KEYS
    }


@dataclass
class TimeTrackingSettings:
    """One row per user, created lazily on first update."""

    user_id: str
    default_billable_rate: float = 0.0
    rounding_interval: int = DEFAULT_ROUNDING_INTERVAL
    auto_stop_timer_after_inactivity: int = DEFAULT_AUTO_STOP
    reminder_interval: int = 0
    working_hours: Dict[str, WorkingDay] = field(default_factory=default_working_hours)

    @classmethod
    def defaults_for(cls, user_id: str) -> "TimeTrackingSettings":
        return cls(user_id=user_id)

    def validate(self) -> None:
        for name in ("default_billable_rate", "rounding_interval",
                     "auto_stop_timer_after_inactivity", "reminder_interval"):
            value = getattr(self, name)
            if value is None or value < 0:
                raise ValidationError(f"{name} cannot be negative", name)

        unknown = set(self.working_hours) - set(WEEKDAY_KEYS)
        if unknown:
            raise ValidationError(
                f"Invalid weekday keys in working_hours: {', '.join(sorted(unknown))}",
                "working_hours",
            )
        for key, day in self.working_hours.items():
            day.validate(key)
