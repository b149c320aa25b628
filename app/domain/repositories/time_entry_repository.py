"""Time Entry repository interface.
Defines the contract for time entry data persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from datetime import datetime

from app.domain.models.time_entry import TimeEntry


class TimeEntryRepository(ABC):
    """
    Repository interface for TimeEntry entity.
    Writes that depend on current state (stop, locked-field update, delete,
    invoice marking) are conditional and report whether they applied, so the
    caller can detect a concurrent change between read and write.
    """

    @abstractmethod
    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        """
        Insert a new time entry.
        Raises ConflictError if the user already has a running timer.
        """
        pass

    @abstractmethod
    async def find_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        """
        Find a time entry by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find_running(self, user_id: str) -> Optional[TimeEntry]:
        """
        Find the user's running timer, latest start first.
        """
        pass

    @abstractmethod
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
        """
        Find a user's entries with start_time inside [start_date, end_date],
        newest first. No limit returns every match.
        """
        pass

    @abstractmethod
    async def count_for_user(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        billable: Optional[bool] = None,
    ) -> int:
        """
        Count entries matching the same filters as find_for_user.
        """
        pass

    @abstractmethod
    async def find_unbilled(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[TimeEntry]:
        """
        Billable, stopped entries not yet referenced by an invoice, oldest first.
        """
        pass

    @abstractmethod
    async def update(self, time_entry: TimeEntry, require_unlocked: bool = True) -> bool:
        """
        Persist changes to an existing entry. invoice_id is never written.
        With require_unlocked the write only applies while invoice_id is unset;
        without it only description, tags and updated_at are written.
        """
        pass

    @abstractmethod
    async def stop(self, time_entry: TimeEntry) -> bool:
        """
        Persist end_time and duration only if the stored entry is still running.
        """
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """
        Hard delete an entry only if it is not invoiced.
        """
        pass

    @abstractmethod
    async def mark_invoiced(self, entry_ids: List[str], invoice_id: str) -> int:
        """
        Set invoice_id on the given stopped, unlocked entries.
        Returns the number of rows locked.
        """
        pass

    @abstractmethod
    async def unlink_invoice(self, user_id: str, invoice_id: str) -> int:
        """
        Clear invoice_id from the user's entries referencing the invoice.
        """
        pass
