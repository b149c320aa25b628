"""
Settings mapper. Working hours are stored as a JSON object keyed by weekday.
"""

from dataclasses import asdict

from app.domain.models.settings import TimeTrackingSettings, WorkingDay, default_working_hours
from app.infrastructure.db.models import TimeTrackingSettingsModel


class SettingsMapper:
    """Maps between TimeTrackingSettings and TimeTrackingSettingsModel."""

    def working_hours_to_json(self, settings: TimeTrackingSettings) -> dict:
        return {key: asdict(day) for key, day in settings.working_hours.items()}

    def domain_to_model(self, settings: TimeTrackingSettings) -> TimeTrackingSettingsModel:
        return TimeTrackingSettingsModel(
            user_id=settings.user_id,
            default_billable_rate=settings.default_billable_rate,
            rounding_interval=settings.rounding_interval,
            auto_stop_timer_after_inactivity=settings.auto_stop_timer_after_inactivity,
            reminder_interval=settings.reminder_interval,
            working_hours=self.working_hours_to_json(settings),
        )

    def update_model(self, model: TimeTrackingSettingsModel, settings: TimeTrackingSettings) -> None:
        model.default_billable_rate = settings.default_billable_rate
        model.rounding_interval = settings.rounding_interval
        model.auto_stop_timer_after_inactivity = settings.auto_stop_timer_after_inactivity
        model.reminder_interval = settings.reminder_interval
        model.working_hours = self.working_hours_to_json(settings)

    def model_to_domain(self, model: TimeTrackingSettingsModel) -> TimeTrackingSettings:
        working_hours = default_working_hours()
        for key, day in (model.working_hours or {}).items():
            working_hours[str(key)] = WorkingDay(**day)

        return TimeTrackingSettings(
            user_id=model.user_id,
            default_billable_rate=float(model.default_billable_rate or 0),
            rounding_interval=model.rounding_interval,
            auto_stop_timer_after_inactivity=model.auto_stop_timer_after_inactivity,
            reminder_interval=model.reminder_interval,
            working_hours=working_hours,
        )
