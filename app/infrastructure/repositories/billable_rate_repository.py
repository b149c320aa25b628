"""
Billable rate repository implementation using SQLAlchemy.
"""

from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import or_, desc

from app.domain.models.billable_rate import BillableRate
from app.domain.repositories.billable_rate_repository import BillableRateRepository as BillableRateRepositoryInterface
from app.infrastructure.db.models import BillableRateModel
from app.infrastructure.mappers.billable_rate_mapper import BillableRateMapper


def _scope_matches(column, value):
    """A null scope column applies to every value."""
    if value is None:
        return column.is_(None)
    return or_(column.is_(None), column == value)


class SQLAlchemyBillableRateRepository(BillableRateRepositoryInterface):
    """SQLAlchemy implementation of billable rate repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = BillableRateMapper()

    async def add(self, rate: BillableRate) -> BillableRate:
        self.session.add(self.mapper.domain_to_model(rate))
        self.session.flush()
        return rate

    async def find_candidates(
        self,
        user_id: Optional[str],
        project_id: Optional[str],
        task_type_id: Optional[str] = None,
    ) -> List[BillableRate]:
        models = self.session.query(BillableRateModel).filter(
            _scope_matches(BillableRateModel.user_id, user_id),
            _scope_matches(BillableRateModel.project_id, project_id),
            _scope_matches(BillableRateModel.task_type_id, task_type_id),
        ).all()
        return [self.mapper.model_to_domain(model) for model in models]

    async def list_rates(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        task_type_id: Optional[str] = None,
    ) -> List[BillableRate]:
        query = self.session.query(BillableRateModel)
        if user_id:
            query = query.filter(BillableRateModel.user_id == user_id)
        if project_id:
            query = query.filter(BillableRateModel.project_id == project_id)
        if task_type_id:
            query = query.filter(BillableRateModel.task_type_id == task_type_id)

        models = query.order_by(desc(BillableRateModel.effective_from), desc(BillableRateModel.id)).all()
        return [self.mapper.model_to_domain(model) for model in models]
