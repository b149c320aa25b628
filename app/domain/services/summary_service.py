"""Summary aggregation over tracked time.
Groups a user's entries by calendar period, project or task and totals them.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from app.domain.models.base import ValidationError, as_utc
from app.domain.models.summary import SummaryGroupBy, TimeTrackingSummary
from app.domain.models.time_entry import TimeEntry
from app.domain.repositories.time_entry_repository import TimeEntryRepository
from app.domain.services.billing_service import round_currency

logger = logging.getLogger(__name__)


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def week_start(day: date) -> date:
    """The Sunday that begins the week containing the given day."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def group_key(entry: TimeEntry, group_by: SummaryGroupBy) -> str:
    day = as_utc(entry.start_time).date()
    if group_by == SummaryGroupBy.DAY:
        return day.isoformat()
    if group_by == SummaryGroupBy.WEEK:
        return week_start(day).isoformat()
    if group_by == SummaryGroupBy.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if group_by == SummaryGroupBy.PROJECT:
        return entry.project_id
    return entry.task_id


def period_for(
    key: str,
    group_by: SummaryGroupBy,
    start_date: datetime,
    end_date: datetime,
) -> Tuple[datetime, datetime]:
    """Derive the period from a calendar key; project and task groups use the query range."""
    if group_by == SummaryGroupBy.DAY:
        start = _midnight(date.fromisoformat(key))
        return start, start + timedelta(days=1)
    if group_by == SummaryGroupBy.WEEK:
        start = _midnight(date.fromisoformat(key))
        return start, start + timedelta(days=7)
    if group_by == SummaryGroupBy.MONTH:
        first = date.fromisoformat(f"{key}-01")
        return _midnight(first), _midnight(first_of_next_month(first))
    return start_date, end_date


def parse_group_by(value) -> SummaryGroupBy:
    try:
        return SummaryGroupBy(value)
    except ValueError:
        allowed = ", ".join(option.value for option in SummaryGroupBy)
        raise ValidationError(f"group_by must be one of: {allowed}", "group_by")


class SummaryService:
    """Read-side aggregation; never raises for an empty result."""

    def __init__(self, time_entry_repository: TimeEntryRepository, currency: str = "USD"):
        self.time_entry_repository = time_entry_repository
        self.currency = currency

    def summarize(
        self,
        user_id: str,
        entries: List[TimeEntry],
        group_by: SummaryGroupBy,
        start_date: datetime,
        end_date: datetime,
    ) -> List[TimeTrackingSummary]:
        groups: Dict[str, TimeTrackingSummary] = {}
        for entry in entries:
            key = group_key(entry, group_by)
            summary = groups.get(key)
            if summary is None:
                period_start, period_end = period_for(key, group_by, start_date, end_date)
                summary = TimeTrackingSummary(
                    user_id=user_id,
                    group_by=group_by,
                    group_key=key,
                    period_start=period_start,
                    period_end=period_end,
                    currency=self.currency,
                    project_id=key if group_by == SummaryGroupBy.PROJECT else None,
                    task_id=key if group_by == SummaryGroupBy.TASK else None,
                )
                groups[key] = summary
            summary.add(entry)

        summaries = [groups[key] for key in sorted(groups)]
        for summary in summaries:
            summary.billable_amount = round_currency(summary.billable_amount)
        return summaries

    async def get_time_summary(
        self,
        user_id: str,
        start_date: datetime,
        end_date: datetime,
        group_by: str = "day",
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
    ) -> List[TimeTrackingSummary]:
        grouping = parse_group_by(group_by)
        start = as_utc(start_date)
        end = as_utc(end_date)
        if start > end:
            raise ValidationError("start_date must not be after end_date", "start_date")

        entries = await self.time_entry_repository.find_for_user(
            user_id,
            project_id=project_id,
            task_id=task_id,
            start_date=start,
            end_date=end,
        )
        summaries = self.summarize(user_id, entries, grouping, start, end)
        logger.debug(
            f"Summarized {len(entries)} entries into {len(summaries)} {grouping.value} groups for {user_id}"
        )
        return summaries
