"""Time entry lifecycle service.
Owns the timer state machine, manual entries, edits under the invoice lock
and the hand-off to invoicing.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from app.domain.models.base import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    TimeRange,
    ValidationError,
    as_utc,
    new_id,
    utcnow,
)
from app.domain.models.task import TaskRef
from app.domain.models.time_entry import (
    TimeEntry,
    TimeEntrySource,
    UNLOCKED_FIELDS,
    normalize_tags,
)
from app.domain.repositories.task_repository import TaskRepository
from app.domain.repositories.time_entry_repository import TimeEntryRepository
from app.domain.services.duration_rounder import round_duration
from app.domain.services.rate_resolver import RateResolver
from app.domain.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "description",
    "tags",
    "start_time",
    "end_time",
    "duration",
    "billable",
    "billable_rate",
    "task_id",
})


class TimeEntryService:
    """
    Domain service for time tracking.
    A user has at most one running timer; entries referenced by an invoice
    only accept description and tag edits and cannot be deleted.
    """

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        task_repository: TaskRepository,
        rate_resolver: RateResolver,
        settings_service: SettingsService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.time_entry_repository = time_entry_repository
        self.task_repository = task_repository
        self.rate_resolver = rate_resolver
        self.settings_service = settings_service
        self.clock = clock

    async def _get_task(self, task_id: str) -> TaskRef:
        task = await self.task_repository.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def _get_owned_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        entry = await self.time_entry_repository.find_by_id(entry_id)
        if entry is None:
            raise NotFoundError("TimeEntry", entry_id)
        if not entry.is_owned_by(user_id):
            logger.warning(f"User {user_id} attempted to access time entry {entry_id}")
            raise ForbiddenError("You do not have permission to modify this time entry")
        return entry

    async def _rounded(self, entry: TimeEntry, seconds: int) -> int:
        """
        Round a stopped duration per the user's settings. Timer entries keep
        their raw seconds, at least one, when rounding would leave nothing.
        """
        settings = await self.settings_service.get_user_settings(entry.user_id)
        rounded = round_duration(seconds, settings.rounding_interval)
        if rounded == 0 and entry.source == TimeEntrySource.TIMER:
            return max(int(seconds), 1)
        return rounded

    async def start_timer(
        self,
        user_id: str,
        task_id: str,
        description: Optional[str] = None,
        billable: bool = True,
        tags: Optional[List[str]] = None,
    ) -> TimeEntry:
        """
        Start a running timer on a task.
        A missing rate is not an error; the entry simply carries no rate.
        """
        running = await self.time_entry_repository.find_running(user_id)
        if running is not None:
            logger.warning(f"User {user_id} tried to start a second timer while {running.id} runs")
            raise ConflictError("An active timer is already running")

        task = await self._get_task(task_id)
        settings = await self.settings_service.get_user_settings(user_id)
        rate = await self.rate_resolver.resolve_hourly_rate(
            user_id, task.project_id, task.task_type_id, settings
        )

        now = self.clock()
        entry = TimeEntry(
            id=new_id(),
            user_id=user_id,
            task_id=task.id,
            project_id=task.project_id,
            description=description,
            start_time=now,
            billable=billable,
            billable_rate=rate,
            tags=tags or [],
            source=TimeEntrySource.TIMER,
            created_at=now,
            updated_at=now,
        )
        entry.validate()
        saved = await self.time_entry_repository.add(entry)
        logger.info(f"Started timer {saved.id} for user {user_id} on task {task_id}")
        return saved

    async def stop_timer(
        self,
        user_id: str,
        entry_id: str,
        end_time: Optional[datetime] = None,
    ) -> TimeEntry:
        entry = await self._get_owned_entry(user_id, entry_id)
        if not entry.is_running:
            raise ConflictError("Timer is already stopped")

        end = as_utc(end_time) or self.clock()
        time_range = TimeRange(entry.start_time, end)
        duration = await self._rounded(entry, time_range.duration_seconds)

        entry.stop(end, duration)
        entry.validate()
        if not await self.time_entry_repository.stop(entry):
            raise ConflictError("Timer is already stopped")

        logger.info(f"Stopped timer {entry.id} for user {user_id}: {duration}s")
        return entry

    async def create_manual_entry(
        self,
        user_id: str,
        task_id: str,
        project_id: str,
        start_time: datetime,
        end_time: datetime,
        description: Optional[str] = None,
        duration: Optional[int] = None,
        billable: bool = True,
        billable_rate: Optional[float] = None,
        tags: Optional[List[str]] = None,
    ) -> TimeEntry:
        """
        Record already finished work.
        The time range is checked before anything else; an explicit duration
        replaces the elapsed time but is still rounded.
        """
        start = as_utc(start_time)
        end = as_utc(end_time)
        time_range = TimeRange(start, end)

        if duration is not None and duration <= 0:
            raise ValidationError("Duration must be greater than zero", "duration")
        if billable_rate is not None and billable_rate < 0:
            raise ValidationError("Billable rate cannot be negative", "billable_rate")

        task = await self._get_task(task_id)
        if not task.belongs_to(project_id):
            raise ValidationError(
                f"Task {task_id} does not belong to project {project_id}", "project_id"
            )

        settings = await self.settings_service.get_user_settings(user_id)
        raw = duration if duration is not None else time_range.duration_seconds
        rounded = round_duration(raw, settings.rounding_interval)

        rate = billable_rate
        if billable and rate is None:
            rate = await self.rate_resolver.resolve_hourly_rate(
                user_id, task.project_id, task.task_type_id, settings
            )

        now = self.clock()
        entry = TimeEntry(
            id=new_id(),
            user_id=user_id,
            task_id=task.id,
            project_id=task.project_id,
            description=description,
            start_time=start,
            end_time=end,
            duration=rounded,
            billable=billable,
            billable_rate=rate,
            tags=tags or [],
            source=TimeEntrySource.MANUAL,
            created_at=now,
            updated_at=now,
        )
        entry.validate()
        saved = await self.time_entry_repository.add(entry)
        logger.info(f"Created manual entry {saved.id} for user {user_id}: {rounded}s")
        return saved

    async def update_time_entry(
        self,
        user_id: str,
        entry_id: str,
        updates: Dict[str, Any],
    ) -> TimeEntry:
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown time entry fields: {', '.join(sorted(unknown))}",
                sorted(unknown)[0],
            )

        entry = await self._get_owned_entry(user_id, entry_id)

        disallowed = entry.locked_fields(updates)
        if disallowed:
            logger.warning(f"Rejected edit of invoiced entry {entry_id}: {disallowed}")
            raise ConflictError(
                f"Cannot modify invoiced time entry fields: {', '.join(disallowed)}",
                disallowed,
            )

        if "description" in updates:
            entry.description = updates["description"]
        if "tags" in updates:
            entry.tags = normalize_tags(updates["tags"])
        if "billable" in updates and updates["billable"] is not None:
            entry.billable = bool(updates["billable"])
        if "billable_rate" in updates:
            rate = updates["billable_rate"]
            if rate is not None and rate < 0:
                raise ValidationError("Billable rate cannot be negative", "billable_rate")
            entry.billable_rate = rate
        if updates.get("task_id") is not None and updates["task_id"] != entry.task_id:
            task = await self._get_task(updates["task_id"])
            entry.task_id = task.id
            entry.project_id = task.project_id

        await self._apply_time_changes(entry, updates)
        entry.validate()

        entry.mark_as_updated()
        require_unlocked = bool(set(updates) - UNLOCKED_FIELDS)
        if not await self.time_entry_repository.update(entry, require_unlocked=require_unlocked):
            if require_unlocked:
                raise ConflictError("Time entry was invoiced and can no longer be modified")
            raise NotFoundError("TimeEntry", entry_id)
        if not require_unlocked:
            # the lock may have moved since the read
            entry = await self.time_entry_repository.find_by_id(entry_id)

        logger.info(f"Updated time entry {entry_id}: {sorted(updates)}")
        return entry

    async def _apply_time_changes(self, entry: TimeEntry, updates: Dict[str, Any]) -> None:
        """Recompute the stored duration when the range or duration changes."""
        touches_range = "start_time" in updates or "end_time" in updates
        explicit = updates.get("duration")
        if not touches_range and "duration" not in updates:
            return

        if entry.is_running:
            if updates.get("end_time") is not None or explicit is not None:
                raise ConflictError("Stop the running timer instead of setting its end or duration")
            if updates.get("start_time") is not None:
                start = as_utc(updates["start_time"])
                if start > self.clock():
                    raise ValidationError("Start time cannot be in the future", "start_time")
                entry.start_time = start
            return

        start = as_utc(updates.get("start_time")) or entry.start_time
        end = as_utc(updates.get("end_time")) or entry.end_time
        time_range = TimeRange(start, end)

        if explicit is not None and explicit <= 0:
            raise ValidationError("Duration must be greater than zero", "duration")

        raw = explicit if explicit is not None else time_range.duration_seconds
        entry.start_time = start
        entry.end_time = end
        entry.duration = await self._rounded(entry, raw)

    async def delete_time_entry(self, user_id: str, entry_id: str) -> None:
        entry = await self._get_owned_entry(user_id, entry_id)
        if entry.is_locked:
            logger.warning(f"Rejected delete of invoiced entry {entry_id}")
            raise ConflictError("Cannot delete an invoiced time entry")

        if not await self.time_entry_repository.delete(entry_id):
            raise ConflictError("Cannot delete an invoiced time entry")
        logger.info(f"Deleted time entry {entry_id} for user {user_id}")

    async def get_current_timer(self, user_id: str) -> Optional[TimeEntry]:
        return await self.time_entry_repository.find_running(user_id)

    async def get_time_entry(self, user_id: str, entry_id: str) -> TimeEntry:
        return await self._get_owned_entry(user_id, entry_id)

    async def list_time_entries(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        billable: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[TimeEntry], int]:
        """Page through a user's entries, newest first."""
        if page < 1:
            raise ValidationError("Page must be 1 or greater", "page")
        if limit < 1:
            raise ValidationError("Limit must be 1 or greater", "limit")

        filters = dict(
            project_id=project_id,
            task_id=task_id,
            start_date=as_utc(start_date),
            end_date=as_utc(end_date),
            billable=billable,
        )
        entries = await self.time_entry_repository.find_for_user(
            user_id, limit=limit, offset=(page - 1) * limit, **filters
        )
        total = await self.time_entry_repository.count_for_user(user_id, **filters)
        return entries, total

    async def get_unbilled_entries(
        self,
        user_id: str,
        project_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> List[TimeEntry]:
        return await self.time_entry_repository.find_unbilled(
            user_id, project_id, as_utc(start_date), as_utc(end_date)
        )

    async def mark_entries_invoiced(
        self,
        user_id: str,
        entry_ids: List[str],
        invoice_id: str,
    ) -> List[TimeEntry]:
        """
        Lock entries against an invoice. Every entry must be owned, stopped
        and not yet invoiced; otherwise nothing is locked.
        """
        if not invoice_id:
            raise ValidationError("Invoice id is required", "invoice_id")
        unique_ids = list(dict.fromkeys(entry_ids))
        if not unique_ids:
            raise ValidationError("At least one time entry is required", "entry_ids")

        entries = []
        for entry_id in unique_ids:
            entry = await self._get_owned_entry(user_id, entry_id)
            if entry.is_running:
                raise ConflictError(f"Time entry {entry_id} is still running")
            if entry.is_locked:
                raise ConflictError(
                    f"Time entry {entry_id} is already invoiced on {entry.invoice_id}"
                )
            entries.append(entry)

        locked = await self.time_entry_repository.mark_invoiced(unique_ids, invoice_id)
        if locked != len(unique_ids):
            raise ConflictError("Some time entries were invoiced concurrently")

        for entry in entries:
            entry.invoice_id = invoice_id
        logger.info(f"Locked {locked} time entries on invoice {invoice_id}")
        return entries

    async def unlink_invoice(self, user_id: str, invoice_id: str) -> int:
        """Release every entry of the user that references the invoice."""
        released = await self.time_entry_repository.unlink_invoice(user_id, invoice_id)
        logger.info(f"Released {released} time entries from invoice {invoice_id}")
        return released
