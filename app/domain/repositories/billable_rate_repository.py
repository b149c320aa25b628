"""Billable rate repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from app.domain.models.billable_rate import BillableRate


class BillableRateRepository(ABC):
    """Billable rates are shared reference data."""

    @abstractmethod
    async def add(self, rate: BillableRate) -> BillableRate:
        pass

    @abstractmethod
    async def find_candidates(
        self,
        user_id: Optional[str],
        project_id: Optional[str],
        task_type_id: Optional[str] = None,
    ) -> List[BillableRate]:
        """
        Rates whose every scope field is either null or equal to the supplied
        value. Validity windows and precedence are applied by the caller.
        """
        pass

    @abstractmethod
    async def list_rates(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        task_type_id: Optional[str] = None,
    ) -> List[BillableRate]:
        """Rates filtered by exact scope values, most recent effective_from first."""
        pass
