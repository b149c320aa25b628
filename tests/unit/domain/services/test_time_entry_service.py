"""
Unit tests for TimeEntryService.
"""

import pytest
from datetime import datetime, timedelta, timezone

from app.domain.models.base import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.domain.models.time_entry import TimeEntrySource


def at(hour, minute=0, day=6):
    return datetime(2024, 3, day, hour, minute, tzinfo=timezone.utc)


@pytest.mark.asyncio
class TestTimer:
    """Start and stop behaviour of the running timer."""

    async def test_start_timer_creates_running_entry(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1", description="Wireframes")

        assert entry.is_running
        assert entry.start_time == clock.now
        assert entry.project_id == "project-1"
        assert entry.source == TimeEntrySource.TIMER
        assert entry.duration == 0

    async def test_start_timer_resolves_rate(self, time_entry_service, rate_repository, rate_factory):
        await rate_repository.add(rate_factory("r", 90, user_id="user-1", task_type_id="design"))

        entry = await time_entry_service.start_timer("user-1", "task-1")

        assert entry.billable_rate == 90

    async def test_start_timer_without_rate_is_allowed(self, time_entry_service):
        entry = await time_entry_service.start_timer("user-1", "task-3")
        assert entry.billable_rate is None

    async def test_second_timer_is_rejected(self, time_entry_service, entry_repository):
        await time_entry_service.start_timer("user-1", "task-1")

        with pytest.raises(ConflictError, match="active timer"):
            await time_entry_service.start_timer("user-1", "task-2")

        running = [e for e in entry_repository.entries.values() if e.is_running]
        assert len(running) == 1

    async def test_other_users_timer_does_not_conflict(self, time_entry_service):
        await time_entry_service.start_timer("user-1", "task-1")
        entry = await time_entry_service.start_timer("user-2", "task-1")
        assert entry.user_id == "user-2"

    async def test_start_timer_unknown_task(self, time_entry_service):
        with pytest.raises(NotFoundError):
            await time_entry_service.start_timer("user-1", "missing")

    async def test_stop_timer_rounds_duration(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(minutes=52, seconds=30)

        stopped = await time_entry_service.stop_timer("user-1", entry.id)

        assert not stopped.is_running
        assert stopped.end_time == clock.now
        assert stopped.duration == 3600
        assert await time_entry_service.get_current_timer("user-1") is None

    async def test_stop_timer_with_explicit_end(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")

        stopped = await time_entry_service.stop_timer("user-1", entry.id, clock.now + timedelta(minutes=30))

        assert stopped.duration == 1800

    async def test_stop_timer_twice_conflicts(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(minutes=10)
        await time_entry_service.stop_timer("user-1", entry.id)

        with pytest.raises(ConflictError, match="already stopped"):
            await time_entry_service.stop_timer("user-1", entry.id)

    async def test_stop_timer_end_before_start(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")

        with pytest.raises(ValidationError):
            await time_entry_service.stop_timer("user-1", entry.id, clock.now - timedelta(minutes=1))

    async def test_stop_timer_of_other_user_is_forbidden(self, time_entry_service):
        entry = await time_entry_service.start_timer("user-1", "task-1")

        with pytest.raises(ForbiddenError):
            await time_entry_service.stop_timer("user-2", entry.id)

    async def test_stop_unknown_timer(self, time_entry_service):
        with pytest.raises(NotFoundError):
            await time_entry_service.stop_timer("user-1", "missing")

    async def test_short_timer_keeps_elapsed_seconds(self, time_entry_service, entry_repository, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(minutes=5)

        stopped = await time_entry_service.stop_timer("user-1", entry.id)

        assert stopped.duration == 300
        assert entry_repository.entries[entry.id].duration == 300

    async def test_sub_second_timer_records_one_second(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(milliseconds=400)

        stopped = await time_entry_service.stop_timer("user-1", entry.id)

        assert stopped.duration == 1

    async def test_short_manual_entry_may_round_to_zero(self, time_entry_service):
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(9, 5)
        )
        assert entry.duration == 0

    async def test_new_timer_after_stop(self, time_entry_service, clock):
        first = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(minutes=20)
        await time_entry_service.stop_timer("user-1", first.id)

        second = await time_entry_service.start_timer("user-1", "task-2")
        assert (await time_entry_service.get_current_timer("user-1")).id == second.id


@pytest.mark.asyncio
class TestManualEntries:

    async def test_ninety_minute_entry(self, time_entry_service):
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(10, 30)
        )

        assert entry.duration == 5400
        assert entry.source == TimeEntrySource.MANUAL
        assert not entry.is_running

    async def test_end_equal_to_start_is_rejected(self, time_entry_service):
        with pytest.raises(ValidationError) as exc_info:
            await time_entry_service.create_manual_entry(
                "user-1", "task-1", "project-1", at(9), at(9)
            )
        assert exc_info.value.field == "end_time"

    async def test_range_is_checked_before_task_lookup(self, time_entry_service):
        with pytest.raises(ValidationError):
            await time_entry_service.create_manual_entry(
                "user-1", "missing", "project-1", at(10), at(9)
            )

    async def test_task_must_belong_to_project(self, time_entry_service):
        with pytest.raises(ValidationError) as exc_info:
            await time_entry_service.create_manual_entry(
                "user-1", "task-3", "project-1", at(9), at(10)
            )
        assert exc_info.value.field == "project_id"

    async def test_explicit_duration_is_rounded(self, time_entry_service):
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(12), duration=1000
        )
        assert entry.duration == 900

    async def test_non_positive_duration_is_rejected(self, time_entry_service):
        with pytest.raises(ValidationError):
            await time_entry_service.create_manual_entry(
                "user-1", "task-1", "project-1", at(9), at(10), duration=0
            )

    async def test_negative_rate_is_rejected(self, time_entry_service):
        with pytest.raises(ValidationError):
            await time_entry_service.create_manual_entry(
                "user-1", "task-1", "project-1", at(9), at(10), billable_rate=-5
            )

    async def test_explicit_rate_is_kept(self, time_entry_service, rate_repository, rate_factory):
        await rate_repository.add(rate_factory("r", 90, user_id="user-1"))
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(10), billable_rate=55
        )
        assert entry.billable_rate == 55

    async def test_non_billable_entry_skips_rate_resolution(self, time_entry_service, rate_repository, rate_factory):
        await rate_repository.add(rate_factory("r", 90, user_id="user-1"))
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(10), billable=False
        )
        assert entry.billable_rate is None
        assert entry.billable_amount == 0

    async def test_rounding_follows_user_settings(self, time_entry_service, settings_service):
        await settings_service.update_user_settings("user-1", {"rounding_interval": 0})
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(9, 7)
        )
        assert entry.duration == 420

    async def test_manual_entry_alongside_running_timer(self, time_entry_service):
        await time_entry_service.start_timer("user-1", "task-1")
        entry = await time_entry_service.create_manual_entry(
            "user-1", "task-2", "project-1", at(8), at(9)
        )
        assert entry.duration == 3600


@pytest.mark.asyncio
class TestUpdateAndDelete:

    async def _manual(self, service):
        return await service.create_manual_entry(
            "user-1", "task-1", "project-1", at(9), at(10), billable_rate=100
        )

    async def test_update_description_and_tags(self, time_entry_service):
        entry = await self._manual(time_entry_service)

        updated = await time_entry_service.update_time_entry(
            "user-1", entry.id, {"description": "Review", "tags": ["a", "a", " b "]}
        )

        assert updated.description == "Review"
        assert updated.tags == ["a", "b"]

    async def test_update_end_time_recomputes_duration(self, time_entry_service):
        entry = await self._manual(time_entry_service)

        updated = await time_entry_service.update_time_entry(
            "user-1", entry.id, {"end_time": at(11, 8)}
        )

        assert updated.end_time == at(11, 8)
        assert updated.duration == 2 * 3600 + 900

    async def test_update_with_inverted_range_is_rejected(self, time_entry_service):
        entry = await self._manual(time_entry_service)
        with pytest.raises(ValidationError):
            await time_entry_service.update_time_entry("user-1", entry.id, {"start_time": at(11)})

    async def test_update_task_moves_project(self, time_entry_service):
        entry = await self._manual(time_entry_service)
        updated = await time_entry_service.update_time_entry("user-1", entry.id, {"task_id": "task-3"})
        assert updated.project_id == "project-2"

    async def test_unknown_fields_are_rejected(self, time_entry_service):
        entry = await self._manual(time_entry_service)
        with pytest.raises(ValidationError, match="invoice_id"):
            await time_entry_service.update_time_entry("user-1", entry.id, {"invoice_id": "inv-1"})

    async def test_running_entry_cannot_take_end_time(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        with pytest.raises(ConflictError):
            await time_entry_service.update_time_entry(
                "user-1", entry.id, {"end_time": clock.now + timedelta(hours=1)}
            )

    async def test_running_entry_start_cannot_move_to_future(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        with pytest.raises(ValidationError):
            await time_entry_service.update_time_entry(
                "user-1", entry.id, {"start_time": clock.now + timedelta(minutes=5)}
            )

    async def test_running_entry_start_can_move_back(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        earlier = clock.now - timedelta(minutes=30)
        updated = await time_entry_service.update_time_entry("user-1", entry.id, {"start_time": earlier})
        assert updated.start_time == earlier
        assert updated.is_running

    async def test_locked_entry_accepts_description(self, time_entry_service):
        entry = await self._manual(time_entry_service)
        await time_entry_service.mark_entries_invoiced("user-1", [entry.id], "inv-1")

        updated = await time_entry_service.update_time_entry(
            "user-1", entry.id, {"description": "Still editable"}
        )

        assert updated.description == "Still editable"
        assert updated.invoice_id == "inv-1"

    async def test_locked_entry_rejects_rate_change(self, time_entry_service, entry_repository):
        entry = await self._manual(time_entry_service)
        await time_entry_service.mark_entries_invoiced("user-1", [entry.id], "inv-1")

        with pytest.raises(ConflictError) as exc_info:
            await time_entry_service.update_time_entry(
                "user-1", entry.id, {"billable_rate": 200, "description": "x"}
            )

        assert exc_info.value.fields == ["billable_rate"]
        assert entry_repository.entries[entry.id].billable_rate == 100
        assert entry_repository.entries[entry.id].description is None

    async def test_description_edit_racing_an_invoice_keeps_the_lock(
        self, time_entry_service, entry_repository, monkeypatch
    ):
        entry = await self._manual(time_entry_service)
        read = entry_repository.find_by_id

        async def read_then_invoice(entry_id):
            found = await read(entry_id)
            monkeypatch.setattr(entry_repository, "find_by_id", read)
            await entry_repository.mark_invoiced([entry_id], "inv-1")
            return found

        monkeypatch.setattr(entry_repository, "find_by_id", read_then_invoice)
        updated = await time_entry_service.update_time_entry(
            "user-1", entry.id, {"description": "Late note"}
        )

        assert updated.invoice_id == "inv-1"
        assert updated.description == "Late note"
        assert entry_repository.entries[entry.id].invoice_id == "inv-1"

    async def test_shortened_timer_entry_keeps_elapsed_seconds(self, time_entry_service, clock):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        clock.advance(hours=1)
        await time_entry_service.stop_timer("user-1", entry.id)

        updated = await time_entry_service.update_time_entry(
            "user-1", entry.id, {"end_time": entry.start_time + timedelta(minutes=4)}
        )

        assert updated.duration == 240

    async def test_locked_entry_cannot_be_deleted(self, time_entry_service, entry_repository):
        entry = await self._manual(time_entry_service)
        await time_entry_service.mark_entries_invoiced("user-1", [entry.id], "inv-1")

        with pytest.raises(ConflictError):
            await time_entry_service.delete_time_entry("user-1", entry.id)
        assert entry.id in entry_repository.entries

    async def test_delete_entry(self, time_entry_service, entry_repository):
        entry = await self._manual(time_entry_service)
        await time_entry_service.delete_time_entry("user-1", entry.id)
        assert entry.id not in entry_repository.entries

    async def test_delete_by_other_user_is_forbidden(self, time_entry_service):
        entry = await self._manual(time_entry_service)
        with pytest.raises(ForbiddenError):
            await time_entry_service.delete_time_entry("user-2", entry.id)


@pytest.mark.asyncio
class TestInvoiceHandOff:

    async def test_mark_entries_invoiced(self, time_entry_service, entry_repository, entry_factory):
        for entry_id in ("e1", "e2"):
            await entry_repository.add(entry_factory(entry_id, at(9), 3600, billable_rate=50))

        entries = await time_entry_service.mark_entries_invoiced("user-1", ["e1", "e2", "e1"], "inv-7")

        assert [e.id for e in entries] == ["e1", "e2"]
        assert all(e.invoice_id == "inv-7" for e in entries)
        assert entry_repository.entries["e1"].is_locked

    async def test_already_invoiced_entry_blocks_the_whole_batch(
        self, time_entry_service, entry_repository, entry_factory
    ):
        await entry_repository.add(entry_factory("e1", at(9), 3600))
        await entry_repository.add(entry_factory("e2", at(10), 3600, invoice_id="inv-1"))

        with pytest.raises(ConflictError):
            await time_entry_service.mark_entries_invoiced("user-1", ["e1", "e2"], "inv-2")

        assert entry_repository.entries["e1"].invoice_id is None
        assert entry_repository.entries["e2"].invoice_id == "inv-1"

    async def test_running_entry_cannot_be_invoiced(self, time_entry_service):
        entry = await time_entry_service.start_timer("user-1", "task-1")
        with pytest.raises(ConflictError, match="running"):
            await time_entry_service.mark_entries_invoiced("user-1", [entry.id], "inv-1")

    async def test_empty_batch_is_rejected(self, time_entry_service):
        with pytest.raises(ValidationError):
            await time_entry_service.mark_entries_invoiced("user-1", [], "inv-1")

    async def test_unlink_invoice_releases_entries(self, time_entry_service, entry_repository, entry_factory):
        await entry_repository.add(entry_factory("e1", at(9), 3600, invoice_id="inv-1"))
        await entry_repository.add(entry_factory("e2", at(10), 3600, invoice_id="inv-1"))
        await entry_repository.add(entry_factory("e3", at(11), 3600, invoice_id="inv-2"))

        released = await time_entry_service.unlink_invoice("user-1", "inv-1")

        assert released == 2
        assert not entry_repository.entries["e1"].is_locked
        assert entry_repository.entries["e3"].invoice_id == "inv-2"
        await time_entry_service.delete_time_entry("user-1", "e1")

    async def test_unbilled_entries(self, time_entry_service, entry_repository, entry_factory):
        await entry_repository.add(entry_factory("open", at(9), 3600))
        await entry_repository.add(entry_factory("billed", at(10), 3600, invoice_id="inv-1"))
        await entry_repository.add(entry_factory("internal", at(11), 3600, billable=False))

        entries = await time_entry_service.get_unbilled_entries("user-1")

        assert [e.id for e in entries] == ["open"]


@pytest.mark.asyncio
class TestListing:

    async def test_pagination_and_total(self, time_entry_service, entry_repository, entry_factory):
        for hour in range(8, 13):
            await entry_repository.add(entry_factory(f"e{hour}", at(hour), 600))

        entries, total = await time_entry_service.list_time_entries("user-1", page=2, limit=2)

        assert total == 5
        assert [e.id for e in entries] == ["e10", "e9"]

    async def test_filters_by_project(self, time_entry_service, entry_repository, entry_factory):
        await entry_repository.add(entry_factory("a", at(9), 600))
        await entry_repository.add(entry_factory("b", at(10), 600, project_id="project-2", task_id="task-3"))

        entries, total = await time_entry_service.list_time_entries("user-1", project_id="project-2")

        assert total == 1
        assert entries[0].id == "b"

    async def test_invalid_page(self, time_entry_service):
        with pytest.raises(ValidationError):
            await time_entry_service.list_time_entries("user-1", page=0)

    async def test_get_entry_of_other_user(self, time_entry_service, entry_repository, entry_factory):
        await entry_repository.add(entry_factory("e1", at(9), 600, user_id="user-2"))
        with pytest.raises(ForbiddenError):
            await time_entry_service.get_time_entry("user-1", "e1")
