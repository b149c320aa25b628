"""
Time tracking settings repository implementation using SQLAlchemy.
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.domain.models.settings import TimeTrackingSettings
from app.domain.repositories.settings_repository import SettingsRepository as SettingsRepositoryInterface
from app.infrastructure.db.models import TimeTrackingSettingsModel
from app.infrastructure.mappers.settings_mapper import SettingsMapper


class SQLAlchemySettingsRepository(SettingsRepositoryInterface):
    """SQLAlchemy implementation of settings repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = SettingsMapper()

    async def get(self, user_id: str) -> Optional[TimeTrackingSettings]:
        model = self.session.get(TimeTrackingSettingsModel, user_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def upsert(self, settings: TimeTrackingSettings) -> TimeTrackingSettings:
        model = self.session.get(TimeTrackingSettingsModel, settings.user_id)
        if model is None:
            self.session.add(self.mapper.domain_to_model(settings))
        else:
            self.mapper.update_model(model, settings)
        self.session.flush()
        return settings
