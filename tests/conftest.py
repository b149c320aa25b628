"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from copy import deepcopy
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from app.domain.models.base import ConflictError
from app.domain.models.billable_rate import BillableRate
from app.domain.models.settings import TimeTrackingSettings
from app.domain.models.task import TaskRef
from app.domain.models.time_entry import TimeEntry
from app.domain.repositories import (
    TimeEntryRepository,
    BillableRateRepository,
    SettingsRepository,
    TaskRepository,
)
from app.domain.services.rate_resolver import RateResolver
from app.domain.services.settings_service import SettingsService
from app.domain.services.summary_service import SummaryService
from app.domain.services.time_entry_service import TimeEntryService


# Wednesday
NOW = datetime(2024, 3, 6, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class InMemoryTimeEntryRepository(TimeEntryRepository):
    """Stores copies so callers cannot mutate persisted state by accident."""

    def __init__(self):
        self.entries: Dict[str, TimeEntry] = {}

    def _matching(self, user_id, project_id=None, task_id=None,
                  start_date=None, end_date=None, billable=None) -> List[TimeEntry]:
        result = []
        for entry in self.entries.values():
            if entry.user_id != user_id:
                continue
            if project_id and entry.project_id != project_id:
                continue
            if task_id and entry.task_id != task_id:
                continue
            if start_date and entry.start_time < start_date:
                continue
            if end_date and entry.start_time > end_date:
                continue
            if billable is not None and entry.billable != billable:
                continue
            result.append(deepcopy(entry))
        return result

    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        if time_entry.is_running and any(
            e.user_id == time_entry.user_id and e.is_running for e in self.entries.values()
        ):
            raise ConflictError("An active timer is already running")
        self.entries[time_entry.id] = deepcopy(time_entry)
        return time_entry

    async def find_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        entry = self.entries.get(entry_id)
        return deepcopy(entry) if entry else None

    async def find_running(self, user_id: str) -> Optional[TimeEntry]:
        running = [e for e in self._matching(user_id) if e.is_running]
        running.sort(key=lambda e: e.start_time, reverse=True)
        return running[0] if running else None

    async def find_for_user(self, user_id, project_id=None, task_id=None, start_date=None,
                            end_date=None, billable=None, limit=None, offset=0):
        entries = self._matching(user_id, project_id, task_id, start_date, end_date, billable)
        entries.sort(key=lambda e: (e.start_time, e.id), reverse=True)
        if limit:
            return entries[offset:offset + limit]
        return entries[offset:]

    async def count_for_user(self, user_id, project_id=None, task_id=None,
                             start_date=None, end_date=None, billable=None):
        return len(self._matching(user_id, project_id, task_id, start_date, end_date, billable))

    async def find_unbilled(self, user_id, project_id=None, start_date=None, end_date=None):
        entries = [
            e for e in self._matching(user_id, project_id, None, start_date, end_date, True)
            if not e.is_running and not e.is_locked
        ]
        return sorted(entries, key=lambda e: e.start_time)

    async def update(self, time_entry: TimeEntry, require_unlocked: bool = True) -> bool:
        stored = self.entries.get(time_entry.id)
        if stored is None:
            return False
        if not require_unlocked:
            stored.description = time_entry.description
            stored.tags = list(time_entry.tags)
            stored.updated_at = time_entry.updated_at
            return True
        if stored.is_locked:
            return False
        updated = deepcopy(time_entry)
        updated.invoice_id = stored.invoice_id
        self.entries[time_entry.id] = updated
        return True

    async def stop(self, time_entry: TimeEntry) -> bool:
        stored = self.entries.get(time_entry.id)
        if stored is None or not stored.is_running:
            return False
        stored.end_time = time_entry.end_time
        stored.duration = time_entry.duration
        return True

    async def delete(self, entry_id: str) -> bool:
        stored = self.entries.get(entry_id)
        if stored is None or stored.is_locked:
            return False
        del self.entries[entry_id]
        return True

    async def mark_invoiced(self, entry_ids, invoice_id) -> int:
        count = 0
        for entry_id in entry_ids:
            stored = self.entries.get(entry_id)
            if stored and not stored.is_locked and not stored.is_running:
                stored.invoice_id = invoice_id
                count += 1
        return count

    async def unlink_invoice(self, user_id, invoice_id) -> int:
        count = 0
        for stored in self.entries.values():
            if stored.user_id == user_id and stored.invoice_id == invoice_id:
                stored.invoice_id = None
                count += 1
        return count


class InMemoryBillableRateRepository(BillableRateRepository):

    def __init__(self):
        self.rates: List[BillableRate] = []

    async def add(self, rate: BillableRate) -> BillableRate:
        self.rates.append(deepcopy(rate))
        return rate

    async def find_candidates(self, user_id, project_id, task_type_id=None):
        def fits(scoped, supplied):
            return scoped is None or scoped == supplied

        return [
            deepcopy(r) for r in self.rates
            if fits(r.user_id, user_id) and fits(r.project_id, project_id)
            and fits(r.task_type_id, task_type_id)
        ]

    async def list_rates(self, user_id=None, project_id=None, task_type_id=None):
        rates = [
            deepcopy(r) for r in self.rates
            if (not user_id or r.user_id == user_id)
            and (not project_id or r.project_id == project_id)
            and (not task_type_id or r.task_type_id == task_type_id)
        ]
        return sorted(rates, key=lambda r: (r.effective_from, r.id), reverse=True)


class InMemorySettingsRepository(SettingsRepository):

    def __init__(self):
        self.rows: Dict[str, TimeTrackingSettings] = {}

    async def get(self, user_id):
        row = self.rows.get(user_id)
        return deepcopy(row) if row else None

    async def upsert(self, settings):
        self.rows[settings.user_id] = deepcopy(settings)
        return settings


class InMemoryTaskRepository(TaskRepository):

    def __init__(self, tasks: Optional[List[TaskRef]] = None):
        self.tasks = {task.id: task for task in tasks or []}

    async def find_by_id(self, task_id):
        return self.tasks.get(task_id)

    async def add(self, task):
        self.tasks[task.id] = task
        return task


def make_rate(rate_id: str, hourly_rate: float, user_id=None, project_id=None, task_type_id=None,
              effective_from: datetime = NOW - timedelta(days=30), effective_to=None) -> BillableRate:
    return BillableRate(
        id=rate_id,
        hourly_rate=hourly_rate,
        currency="USD",
        effective_from=effective_from,
        effective_to=effective_to,
        user_id=user_id,
        project_id=project_id,
        task_type_id=task_type_id,
    )


def make_entry(entry_id: str, start: datetime, duration: int, user_id: str = "user-1",
               project_id: str = "project-1", task_id: str = "task-1", billable: bool = True,
               billable_rate: Optional[float] = None, invoice_id: Optional[str] = None) -> TimeEntry:
    return TimeEntry(
        id=entry_id,
        user_id=user_id,
        project_id=project_id,
        task_id=task_id,
        start_time=start,
        end_time=start + timedelta(seconds=duration),
        duration=duration,
        billable=billable,
        billable_rate=billable_rate,
        invoice_id=invoice_id,
        source="manual",
    )


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def entry_repository():
    return InMemoryTimeEntryRepository()


@pytest.fixture
def rate_repository():
    return InMemoryBillableRateRepository()


@pytest.fixture
def settings_repository():
    return InMemorySettingsRepository()


@pytest.fixture
def task_repository():
    return InMemoryTaskRepository([
        TaskRef(id="task-1", project_id="project-1", task_type_id="design"),
        TaskRef(id="task-2", project_id="project-1", task_type_id="development"),
        TaskRef(id="task-3", project_id="project-2"),
    ])


@pytest.fixture
def rate_resolver(rate_repository, clock):
    return RateResolver(rate_repository, clock=clock)


@pytest.fixture
def settings_service(settings_repository):
    return SettingsService(settings_repository)


@pytest.fixture
def time_entry_service(entry_repository, task_repository, rate_resolver, settings_service, clock):
    return TimeEntryService(
        entry_repository,
        task_repository,
        rate_resolver,
        settings_service,
        clock=clock,
    )


@pytest.fixture
def summary_service(entry_repository):
    return SummaryService(entry_repository, currency="USD")


@pytest.fixture
def rate_factory():
    return make_rate


@pytest.fixture
def entry_factory():
    return make_entry
