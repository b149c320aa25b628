"""Time tracking settings repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from app.domain.models.settings import TimeTrackingSettings


class SettingsRepository(ABC):

    @abstractmethod
    async def get(self, user_id: str) -> Optional[TimeTrackingSettings]:
        """Persisted settings for the user, or None when never saved."""
        pass

    @abstractmethod
    async def upsert(self, settings: TimeTrackingSettings) -> TimeTrackingSettings:
        """Insert the row if absent, update it otherwise."""
        pass
