"""
Time entry repository implementation using SQLAlchemy.
"""

import logging
from typing import Optional, List
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, Query
from sqlalchemy import and_, asc, desc

from app.domain.models.base import ConflictError
from app.domain.models.time_entry import TimeEntry
from app.domain.repositories.time_entry_repository import TimeEntryRepository as TimeEntryRepositoryInterface
from app.infrastructure.db.models import TimeEntryModel
from app.infrastructure.mappers.time_entry_mapper import TimeEntryMapper

logger = logging.getLogger(__name__)

# Columns an invoiced entry may still change.
UNLOCKED_COLUMNS = ("description", "tags", "updated_at")


class SQLAlchemyTimeEntryRepository(TimeEntryRepositoryInterface):
    """SQLAlchemy implementation of time entry repository."""

    def __init__(self, session: Session):
        self.session = session
        self.mapper = TimeEntryMapper()

    def _filtered(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        billable: Optional[bool] = None,
    ) -> Query:
        query = self.session.query(TimeEntryModel).filter(TimeEntryModel.user_id == user_id)
        if project_id:
            query = query.filter(TimeEntryModel.project_id == project_id)
        if task_id:
            query = query.filter(TimeEntryModel.task_id == task_id)
        if start_date:
            query = query.filter(TimeEntryModel.start_time >= start_date)
        if end_date:
            query = query.filter(TimeEntryModel.start_time <= end_date)
        if billable is not None:
            query = query.filter(TimeEntryModel.billable == billable)
        return query

    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        """Insert a time entry; the running-timer index turns races into conflicts."""
        self.session.add(self.mapper.domain_to_model(time_entry))
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Rejected insert of time entry {time_entry.id}: {e.orig}")
            if time_entry.is_running:
                raise ConflictError("An active timer is already running")
            raise ConflictError("Time entry conflicts with existing data")
        return time_entry

    async def find_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        """Get time entry by ID."""
        model = self.session.query(TimeEntryModel).filter_by(id=entry_id).first()
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def find_running(self, user_id: str) -> Optional[TimeEntry]:
        """Get currently running time entry for user."""
        model = self.session.query(TimeEntryModel).filter(
            and_(
                TimeEntryModel.user_id == user_id,
                TimeEntryModel.end_time.is_(None)
            )
        ).order_by(desc(TimeEntryModel.start_time)).first()

        if not model:
            return None
        return self.mapper.model_to_domain(model)

    async def find_for_user(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        billable: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[TimeEntry]:
        query = self._filtered(
            user_id, project_id, task_id, start_date, end_date, billable
        ).order_by(desc(TimeEntryModel.start_time), desc(TimeEntryModel.id))

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        return [self.mapper.model_to_domain(model) for model in query.all()]

    async def count_for_user(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        billable: Optional[bool] = None,
    ) -> int:
        return self._filtered(
            user_id, project_id, task_id, start_date, end_date, billable
        ).count()

    async def find_unbilled(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[TimeEntry]:
        query = self._filtered(
            user_id, project_id=project_id, start_date=start_date,
            end_date=end_date, billable=True
        ).filter(
            TimeEntryModel.end_time.isnot(None),
            TimeEntryModel.invoice_id.is_(None),
        ).order_by(asc(TimeEntryModel.start_time))

        return [self.mapper.model_to_domain(model) for model in query.all()]

    async def update(self, time_entry: TimeEntry, require_unlocked: bool = True) -> bool:
        """
        Write the entry back. invoice_id is never written here; only
        mark_invoiced and unlink_invoice move the lock. Without
        require_unlocked only the columns an invoiced entry may change are written.
        """
        values = self.mapper.to_row(time_entry)
        values.pop("invoice_id")
        query = self.session.query(TimeEntryModel).filter(TimeEntryModel.id == time_entry.id)
        if require_unlocked:
            query = query.filter(TimeEntryModel.invoice_id.is_(None))
        else:
            values = {key: values[key] for key in UNLOCKED_COLUMNS}
        updated = query.update(values, synchronize_session="fetch")
        return updated == 1

    async def stop(self, time_entry: TimeEntry) -> bool:
        updated = self.session.query(TimeEntryModel).filter(
            TimeEntryModel.id == time_entry.id,
            TimeEntryModel.end_time.is_(None),
        ).update(
            {
                "end_time": time_entry.end_time,
                "duration": time_entry.duration,
                "updated_at": time_entry.updated_at,
            },
            synchronize_session="fetch",
        )
        return updated == 1

    async def delete(self, entry_id: str) -> bool:
        """Delete time entry by ID unless it is invoiced."""
        deleted = self.session.query(TimeEntryModel).filter(
            TimeEntryModel.id == entry_id,
            TimeEntryModel.invoice_id.is_(None),
        ).delete(synchronize_session="fetch")
        return deleted == 1

    async def mark_invoiced(self, entry_ids: List[str], invoice_id: str) -> int:
        return self.session.query(TimeEntryModel).filter(
            TimeEntryModel.id.in_(entry_ids),
            TimeEntryModel.invoice_id.is_(None),
            TimeEntryModel.end_time.isnot(None),
        ).update({"invoice_id": invoice_id}, synchronize_session="fetch")

    async def unlink_invoice(self, user_id: str, invoice_id: str) -> int:
        return self.session.query(TimeEntryModel).filter(
            TimeEntryModel.user_id == user_id,
            TimeEntryModel.invoice_id == invoice_id,
        ).update({"invoice_id": None}, synchronize_session="fetch")
