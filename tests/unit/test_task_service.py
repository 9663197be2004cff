"""Unit tests for task_service module."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.domain.task import FrequencyUnit, TaskStatus
from src.services import category_service, settings_service, task_log_service, task_service


@pytest.fixture
async def category(patched_db):
    return await category_service.create_category(name="Home", icon="🏠")


@pytest.fixture
async def monthly_task(category):
    return await task_service.create_task(
        category_id=category.id,
        name="Change HVAC filter",
        frequency_value=1,
        frequency_unit=FrequencyUnit.MONTHS,
    )


@pytest.mark.unit
class TestCreateTask:
    async def test_create_task_persists(self, category):
        task = await task_service.create_task(
            category_id=category.id,
            name="Clean gutters",
            description="Front and back",
            frequency_value=6,
            frequency_unit=FrequencyUnit.MONTHS,
        )

        stored = await task_service.get_task(task.id)
        assert stored == task
        assert stored.frequency_description == "Every 6 Months"

    async def test_unknown_category_rejected(self, patched_db):
        with pytest.raises(KeyError, match="Category not found"):
            await task_service.create_task(category_id="missing", name="Wash car")

    async def test_new_task_is_overdue_with_no_reminder(self, monthly_task, recording_sink, now):
        assert await task_service.get_due_date(monthly_task.id) is None
        assert await task_service.get_task_status(monthly_task.id, now) == TaskStatus.OVERDUE
        assert recording_sink.scheduled == []

    async def test_invalid_frequency_rejected(self, category):
        with pytest.raises(ValueError, match="frequency_value"):
            await task_service.create_task(category_id=category.id, name="Bad", frequency_value=0)

    async def test_name_and_description_trimmed(self, category):
        task = await task_service.create_task(category_id=category.id, name="  Wash car ", description=" Inside too ")

        assert task.name == "Wash car"
        assert task.description == "Inside too"


@pytest.mark.unit
class TestCompleteTask:
    async def test_completion_sets_due_date_and_schedules_reminder(self, monthly_task, recording_sink, now):
        log = await task_service.complete_task(monthly_task.id, now=now, notes="New filter")

        assert log.completed_at == now
        assert log.notes == "New filter"
        assert await task_service.get_due_date(monthly_task.id) == now + timedelta(days=30)
        assert await task_service.get_task_status(monthly_task.id, now) == TaskStatus.UP_TO_DATE

        request = recording_sink.pending[monthly_task.id]
        assert request.notify_at == now + timedelta(days=23)
        assert request.title == "Task Reminder"
        assert request.body == "Change HVAC filter is due soon!"

    async def test_unknown_task_raises(self, patched_db, now):
        with pytest.raises(KeyError, match="Task not found"):
            await task_service.complete_task("missing", now=now)

    async def test_backdated_completion_keeps_latest_due_date(self, monthly_task, now):
        await task_service.complete_task(monthly_task.id, completed_at=now, now=now)
        await task_service.complete_task(monthly_task.id, completed_at=now - timedelta(days=10), now=now)

        assert await task_service.get_last_completed_date(monthly_task.id) == now
        assert await task_service.get_due_date(monthly_task.id) == now + timedelta(days=30)

    async def test_naive_completion_time_treated_as_utc(self, monthly_task, now):
        log = await task_service.complete_task(monthly_task.id, completed_at=datetime(2024, 6, 1, 9), now=now)
        assert log.completed_at == datetime(2024, 6, 1, 9, tzinfo=UTC)

    async def test_overdue_completion_schedules_nothing(self, monthly_task, recording_sink, now):
        await task_service.complete_task(monthly_task.id, completed_at=now - timedelta(days=60), now=now)

        assert await task_service.get_task_status(monthly_task.id, now) == TaskStatus.OVERDUE
        assert monthly_task.id not in recording_sink.pending

    async def test_reminder_disabled_task_schedules_nothing(self, category, recording_sink, now):
        task = await task_service.create_task(category_id=category.id, name="Vacuum", is_reminder_enabled=False)
        await task_service.complete_task(task.id, now=now)

        assert recording_sink.scheduled == []

    async def test_notifications_globally_disabled(self, monthly_task, recording_sink, now):
        await settings_service.update_setting(key="notifications_enabled", value=False)
        await task_service.complete_task(monthly_task.id, now=now)

        assert recording_sink.scheduled == []


@pytest.mark.unit
class TestUpdateAndDelete:
    async def test_update_reschedules_with_new_frequency(self, monthly_task, recording_sink, now):
        await task_service.complete_task(monthly_task.id, now=now)

        updated = await task_service.update_task(
            task_id=monthly_task.id, frequency_value=3, frequency_unit=FrequencyUnit.MONTHS, now=now
        )

        assert updated.frequency_value == 3
        assert recording_sink.pending[monthly_task.id].notify_at == now + timedelta(days=83)

    async def test_disabling_reminder_cancels_it(self, monthly_task, recording_sink, now):
        await task_service.complete_task(monthly_task.id, now=now)

        updated = await task_service.update_task(task_id=monthly_task.id, is_reminder_enabled=False, now=now)

        assert updated.is_reminder_enabled is False
        assert monthly_task.id not in recording_sink.pending

    async def test_update_unknown_task_returns_none(self, patched_db):
        assert await task_service.update_task(task_id="missing", name="x") is None

    async def test_blank_description_clears_it(self, category):
        task = await task_service.create_task(category_id=category.id, name="Descale kettle", description="Use vinegar")

        updated = await task_service.update_task(task_id=task.id, description="   ")

        assert updated.description is None
        assert (await task_service.get_task(task.id)).description is None
        assert (await task_service.update_task(task_id=task.id, name="Descale")).description is None

    async def test_move_to_unknown_category_rejected(self, monthly_task):
        with pytest.raises(KeyError, match="Category not found"):
            await task_service.update_task(task_id=monthly_task.id, category_id="missing")

    async def test_delete_removes_logs_and_reminder(self, monthly_task, recording_sink, now):
        await task_service.complete_task(monthly_task.id, now=now)

        assert await task_service.delete_task(monthly_task.id) is True

        assert await task_service.get_task(monthly_task.id) is None
        assert await task_log_service.get_logs_for_task(monthly_task.id) == []
        assert monthly_task.id in recording_sink.cancelled
        assert monthly_task.id not in recording_sink.pending

    async def test_delete_unknown_task(self, patched_db):
        assert await task_service.delete_task("missing") is False

    async def test_unknown_task_status_is_overdue(self, patched_db, now):
        assert await task_service.get_task_status("missing", now) == TaskStatus.OVERDUE


@pytest.mark.unit
class TestQueries:
    async def test_all_tasks_ordered_by_category_then_name(self, patched_db):
        home = await category_service.create_category(name="Home")
        car = await category_service.create_category(name="Car")
        await task_service.create_task(category_id=home.id, name="Alpha")
        await task_service.create_task(category_id=car.id, name="Zulu")
        await task_service.create_task(category_id=car.id, name="Bravo")

        names = [t.name for t in await task_service.get_all_tasks()]

        assert names == ["Bravo", "Zulu", "Alpha"]

    async def test_tasks_by_category(self, patched_db):
        home = await category_service.create_category(name="Home")
        car = await category_service.create_category(name="Car")
        await task_service.create_task(category_id=home.id, name="Mop")
        await task_service.create_task(category_id=car.id, name="Oil change")

        tasks = await task_service.get_tasks_by_category(car.id)

        assert [t.name for t in tasks] == ["Oil change"]

    async def test_single_overview_reads_only_that_task(self, monthly_task, category, monkeypatch, now):
        await task_service.complete_task(monthly_task.id, now=now)
        all_tasks = AsyncMock()
        monkeypatch.setattr(task_service, "get_all_tasks", all_tasks)

        overview = await task_service.get_task_overview(monthly_task.id, now)

        assert overview.task.id == monthly_task.id
        assert overview.category_name == category.name
        assert overview.status == TaskStatus.UP_TO_DATE
        assert overview.due_date == now + timedelta(days=30)
        all_tasks.assert_not_awaited()
        assert await task_service.get_task_overview("missing", now) is None


@pytest.mark.unit
class TestDashboard:
    @pytest.fixture
    async def tasks(self, category, now):
        never = await task_service.create_task(category_id=category.id, name="Never done")

        overdue = await task_service.create_task(
            category_id=category.id, name="Water plants", frequency_value=7, frequency_unit=FrequencyUnit.DAYS
        )
        await task_service.complete_task(overdue.id, completed_at=datetime(2024, 6, 1, tzinfo=UTC), now=now)

        due_soon = await task_service.create_task(
            category_id=category.id, name="Clean litter", frequency_value=10, frequency_unit=FrequencyUnit.DAYS
        )
        await task_service.complete_task(due_soon.id, completed_at=datetime(2024, 6, 6, 12, tzinfo=UTC), now=now)

        up_to_date = await task_service.create_task(category_id=category.id, name="Test smoke alarm")
        await task_service.complete_task(up_to_date.id, completed_at=datetime(2024, 6, 10, tzinfo=UTC), now=now)

        return {"never": never, "overdue": overdue, "due_soon": due_soon, "up_to_date": up_to_date}

    async def test_overdue_never_completed_first(self, tasks, now):
        overdue = await task_service.get_overdue_tasks(now)

        assert [o.task.id for o in overdue] == [tasks["never"].id, tasks["overdue"].id]
        assert overdue[0].due_description == "Never completed"
        assert overdue[1].due_description == "7 days overdue"

    async def test_due_soon(self, tasks, now):
        due_soon = await task_service.get_due_soon_tasks(now)

        assert [o.task.id for o in due_soon] == [tasks["due_soon"].id]
        assert due_soon[0].due_description == "Due tomorrow"
        assert due_soon[0].category_name == "Home"

    async def test_recently_completed(self, tasks, now):
        recent = await task_service.get_recently_completed_tasks(count=2, now=now)

        assert [o.task.id for o in recent] == [tasks["up_to_date"].id, tasks["due_soon"].id]

    async def test_summary_counts(self, tasks, now):
        summary = await task_service.get_dashboard_summary(now)

        assert summary.total_tasks == 4
        assert summary.overdue_count == 2
        assert summary.due_soon_count == 1
        assert summary.up_to_date_count == 1
        assert len(summary.recently_completed) == 3
