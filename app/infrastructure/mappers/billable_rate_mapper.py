"""
Billable rate mapper for converting between domain entities and database models.
"""

from app.domain.models.base import as_utc
from app.domain.models.billable_rate import BillableRate
from app.infrastructure.db.models import BillableRateModel


class BillableRateMapper:
    """Maps between BillableRate domain entity and BillableRateModel database model."""

    def domain_to_model(self, rate: BillableRate) -> BillableRateModel:
        return BillableRateModel(
            id=rate.id,
            user_id=rate.user_id,
            project_id=rate.project_id,
            task_type_id=rate.task_type_id,
            hourly_rate=rate.hourly_rate,
            currency=rate.currency,
            effective_from=rate.effective_from,
            effective_to=rate.effective_to,
            created_at=rate.created_at,
            updated_at=rate.updated_at,
        )

    def model_to_domain(self, model: BillableRateModel) -> BillableRate:
        return BillableRate(
            id=model.id,
            user_id=model.user_id,
            project_id=model.project_id,
            task_type_id=model.task_type_id,
            hourly_rate=float(model.hourly_rate),
            currency=model.currency,
            effective_from=as_utc(model.effective_from),
            effective_to=as_utc(model.effective_to),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )
