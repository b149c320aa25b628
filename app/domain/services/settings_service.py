"""Settings store for per-user time tracking configuration."""

import logging
from dataclasses import asdict, replace
from typing import Any, Dict, Optional

from app.domain.models.base import ValidationError
from app.domain.models.settings import TimeTrackingSettings, WorkingDay
from app.domain.repositories.settings_repository import SettingsRepository

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = frozenset({
    "default_billable_rate",
    "rounding_interval",
    "auto_stop_timer_after_inactivity",
    "reminder_interval",
    "working_hours",
})


def _merge_working_day(key: str, value: Any, current: Optional[WorkingDay]) -> WorkingDay:
    """Apply a partial day over the current one."""
    if isinstance(value, WorkingDay):
        return value
    if not isinstance(value, dict):
        raise ValidationError(f"working_hours[{key}] must be an object", "working_hours")
    unknown = set(value) - {"start", "end", "is_work_day"}
    if unknown:
        raise ValidationError(
            f"Unknown working_hours fields: {', '.join(sorted(unknown))}",
            "working_hours",
        )
    merged = asdict(current) if current is not None else {}
    merged.update(value)
    return WorkingDay(**merged)


class SettingsService:
    """
    Reads settings with defaulting and writes them with merge-then-upsert.
    Defaults are never persisted by a read.
    """

    def __init__(self, settings_repository: SettingsRepository):
        self.settings_repository = settings_repository

    async def get_user_settings(self, user_id: str) -> TimeTrackingSettings:
        settings = await self.settings_repository.get(user_id)
        if settings is None:
            return TimeTrackingSettings.defaults_for(user_id)
        return settings

    async def update_user_settings(
        self,
        user_id: str,
        updates: Dict[str, Any],
    ) -> TimeTrackingSettings:
        """
        Merge a partial update over the current settings and upsert.
        A user_id in the payload is ignored; the caller's id always wins.
        """
        changes = {k: v for k, v in updates.items() if k != "user_id"}
        unknown = set(changes) - SETTINGS_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown settings fields: {', '.join(sorted(unknown))}",
                sorted(unknown)[0],
            )

        current = await self.get_user_settings(user_id)

        if "working_hours" in changes:
            incoming = changes["working_hours"] or {}
            merged_hours = dict(current.working_hours)
            for key, value in incoming.items():
                key = str(key)
                merged_hours[key] = _merge_working_day(key, value, merged_hours.get(key))
            changes["working_hours"] = merged_hours

        merged = replace(current, user_id=user_id, **changes)
        merged.validate()

        saved = await self.settings_repository.upsert(merged)
        logger.info(f"Updated time tracking settings for user {user_id}: {sorted(changes)}")
        return saved
