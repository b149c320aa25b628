"""
BillableRate domain model.
Hourly prices scoped to any combination of user, project and task type.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from app.domain.models.base import BaseEntity, ValidationError, as_utc


@dataclass(eq=False, kw_only=True)
class BillableRate(BaseEntity):
    """
    A priced scope combination valid over [effective_from, effective_to).
    A None scope field applies to every value of that dimension.
    """

    hourly_rate: float
    currency: str
    effective_from: datetime
    effective_to: Optional[datetime] = None
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    task_type_id: Optional[str] = None

    @property
    def is_unscoped(self) -> bool:
        return self.user_id is None and self.project_id is None and self.task_type_id is None

    def is_effective_at(self, moment: datetime) -> bool:
        """Half-open validity window check."""
        moment = as_utc(moment)
        if as_utc(self.effective_from) > moment:
            return False
        return self.effective_to is None or moment < as_utc(self.effective_to)

    def matches(
        self,
        user_id: Optional[str],
        project_id: Optional[str],
        task_type_id: Optional[str] = None,
    ) -> bool:
        """Every non-null scope field must equal the supplied value."""
        if self.is_unscoped:
            return False
        for scoped, supplied in (
            (self.user_id, user_id),
            (self.project_id, project_id),
            (self.task_type_id, task_type_id),
        ):
            if scoped is not None and scoped != supplied:
                return False
        return True

    def validate(self) -> None:
        if self.hourly_rate is None or self.hourly_rate < 0:
            raise ValidationError("Hourly rate must be zero or positive", "hourly_rate")
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha():
            raise ValidationError("Currency must be a 3-letter ISO code", "currency")
        if self.effective_to is not None and as_utc(self.effective_to) <= as_utc(self.effective_from):
            raise ValidationError("effective_to must be after effective_from", "effective_to")
        if self.is_unscoped:
            raise ValidationError(
                "A rate must be scoped to at least one of user, project or task type",
                "user_id",
            )
