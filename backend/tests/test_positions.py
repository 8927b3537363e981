"""
Position engine tests.

These run directly against the service layer with a real database session
and check that every column stays densely numbered 0..n-1.
"""

import uuid

import pytest

from lanes.models import Project, Task, TaskStatus, User
from lanes.services import positions
from lanes.services.positions import clamp_position


async def make_project(session) -> Project:
    session.add(User(id="alice", email="alice@example.com", display_name="Alice"))
    await session.flush()
    project = Project(name="Board", created_by="alice")
    session.add(project)
    await session.flush()
    return project


async def add_task(session, project, title, status=TaskStatus.TO_DO) -> Task:
    task = Task(title=title, status=status, project_id=project.id, created_by="alice")
    return await positions.insert_task(session, task)


async def board(session, project) -> dict[TaskStatus, list[str]]:
    """Column -> titles in position order, asserting density on the way."""
    columns: dict[TaskStatus, list[str]] = {status: [] for status in TaskStatus}
    for task in await positions.list_tasks(session, project.id):
        assert task.position == len(columns[task.status]), f"gap or duplicate at {task.title}"
        columns[task.status].append(task.title)
    return columns


class TestClampPosition:

    def test_within_range(self):
        assert clamp_position(1, 3) == 1

    def test_past_the_end_appends(self):
        assert clamp_position(99, 3) == 3

    def test_empty_column(self):
        assert clamp_position(5, 0) == 0

    def test_negative_floors_at_zero(self):
        assert clamp_position(-2, 3) == 0


class TestInsert:

    @pytest.mark.asyncio
    async def test_appends_in_creation_order(self, test_session):
        project = await make_project(test_session)

        a = await add_task(test_session, project, "a")
        b = await add_task(test_session, project, "b")
        c = await add_task(test_session, project, "c")

        assert [a.position, b.position, c.position] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_columns_are_numbered_independently(self, test_session):
        project = await make_project(test_session)

        await add_task(test_session, project, "todo")
        doing = await add_task(test_session, project, "doing", TaskStatus.IN_PROGRESS)

        assert doing.position == 0

    @pytest.mark.asyncio
    async def test_projects_are_numbered_independently(self, test_session):
        project = await make_project(test_session)
        other = Project(name="Other", created_by="alice")
        test_session.add(other)
        await test_session.flush()

        await add_task(test_session, project, "a")
        first = await add_task(test_session, other, "x")

        assert first.position == 0


class TestRemove:

    @pytest.mark.asyncio
    async def test_closes_the_gap(self, test_session):
        project = await make_project(test_session)
        await add_task(test_session, project, "a")
        b = await add_task(test_session, project, "b")
        await add_task(test_session, project, "c")

        assert await positions.remove_task(test_session, b.id) is True

        assert (await board(test_session, project))[TaskStatus.TO_DO] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_leaves_other_columns_alone(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")
        await add_task(test_session, project, "p", TaskStatus.DONE)
        await add_task(test_session, project, "q", TaskStatus.DONE)

        await positions.remove_task(test_session, a.id)

        assert (await board(test_session, project))[TaskStatus.DONE] == ["p", "q"]

    @pytest.mark.asyncio
    async def test_missing_task(self, test_session):
        assert await positions.remove_task(test_session, uuid.uuid4()) is False


class TestMove:

    @pytest.mark.asyncio
    async def test_cross_column_opens_and_closes_slots(self, test_session):
        """
        TO_DO [x, y, z], IN_PROGRESS [p]; move x to IN_PROGRESS at 0.
        Result: TO_DO [y, z], IN_PROGRESS [x, p].
        """
        project = await make_project(test_session)
        x = await add_task(test_session, project, "x")
        await add_task(test_session, project, "y")
        await add_task(test_session, project, "z")
        await add_task(test_session, project, "p", TaskStatus.IN_PROGRESS)

        moved = await positions.move_task(test_session, x.id, project.id, TaskStatus.IN_PROGRESS, 0)

        assert (moved.status, moved.position) == (TaskStatus.IN_PROGRESS, 0)
        columns = await board(test_session, project)
        assert columns[TaskStatus.TO_DO] == ["y", "z"]
        assert columns[TaskStatus.IN_PROGRESS] == ["x", "p"]

    @pytest.mark.asyncio
    async def test_within_column_downwards(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")
        await add_task(test_session, project, "b")
        await add_task(test_session, project, "c")
        await add_task(test_session, project, "d")

        moved = await positions.move_task(test_session, a.id, project.id, TaskStatus.TO_DO, 2)

        assert moved.position == 2
        assert (await board(test_session, project))[TaskStatus.TO_DO] == ["b", "c", "a", "d"]

    @pytest.mark.asyncio
    async def test_within_column_upwards(self, test_session):
        project = await make_project(test_session)
        await add_task(test_session, project, "a")
        await add_task(test_session, project, "b")
        await add_task(test_session, project, "c")
        d = await add_task(test_session, project, "d")

        moved = await positions.move_task(test_session, d.id, project.id, TaskStatus.TO_DO, 1)

        assert moved.position == 1
        assert (await board(test_session, project))[TaskStatus.TO_DO] == ["a", "d", "b", "c"]

    @pytest.mark.asyncio
    async def test_same_slot_is_a_noop(self, test_session):
        project = await make_project(test_session)
        await add_task(test_session, project, "a")
        b = await add_task(test_session, project, "b")
        before = b.updated_at

        moved = await positions.move_task(test_session, b.id, project.id, TaskStatus.TO_DO, 1)

        assert moved.position == 1
        assert moved.updated_at == before
        assert (await board(test_session, project))[TaskStatus.TO_DO] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_oversized_position_clamps_to_end(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")
        await add_task(test_session, project, "p", TaskStatus.DONE)
        await add_task(test_session, project, "q", TaskStatus.DONE)

        moved = await positions.move_task(test_session, a.id, project.id, TaskStatus.DONE, 99)

        assert moved.position == 2
        assert (await board(test_session, project))[TaskStatus.DONE] == ["p", "q", "a"]

    @pytest.mark.asyncio
    async def test_oversized_position_within_column(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")
        await add_task(test_session, project, "b")

        moved = await positions.move_task(test_session, a.id, project.id, TaskStatus.TO_DO, 99)

        assert moved.position == 1
        assert (await board(test_session, project))[TaskStatus.TO_DO] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_into_empty_column(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")

        moved = await positions.move_task(test_session, a.id, project.id, TaskStatus.DONE, 3)

        assert (moved.status, moved.position) == (TaskStatus.DONE, 0)

    @pytest.mark.asyncio
    async def test_task_from_another_project(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")

        moved = await positions.move_task(test_session, a.id, uuid.uuid4(), TaskStatus.DONE, 0)

        assert moved is None

    @pytest.mark.asyncio
    async def test_density_survives_mixed_operations(self, test_session):
        project = await make_project(test_session)
        tasks = [await add_task(test_session, project, f"t{i}") for i in range(6)]

        await positions.move_task(test_session, tasks[0].id, project.id, TaskStatus.IN_PROGRESS, 0)
        await positions.move_task(test_session, tasks[3].id, project.id, TaskStatus.IN_PROGRESS, 0)
        await positions.move_task(test_session, tasks[5].id, project.id, TaskStatus.TO_DO, 0)
        await positions.remove_task(test_session, tasks[2].id)
        await positions.move_task(test_session, tasks[0].id, project.id, TaskStatus.DONE, 7)
        await add_task(test_session, project, "late", TaskStatus.IN_PROGRESS)

        columns = await board(test_session, project)
        assert columns[TaskStatus.TO_DO] == ["t5", "t1", "t4"]
        assert columns[TaskStatus.IN_PROGRESS] == ["t3", "late"]
        assert columns[TaskStatus.DONE] == ["t0"]
        assert await positions.audit_positions(test_session, project.id) == []


class TestAuditAndCompact:

    @pytest.mark.asyncio
    async def test_detects_and_repairs_gaps(self, test_session):
        project = await make_project(test_session)
        a = await add_task(test_session, project, "a")
        b = await add_task(test_session, project, "b")
        c = await add_task(test_session, project, "c")

        # Corrupt the column behind the engine's back
        b.position = 4
        c.position = 4
        await test_session.flush()

        reports = await positions.audit_positions(test_session, project.id)
        assert len(reports) == 1
        assert reports[0].status == TaskStatus.TO_DO
        assert reports[0].positions == [0, 4, 4]
        assert reports[0].expected == [0, 1, 2]

        changed = await positions.compact_column(test_session, project.id, TaskStatus.TO_DO)

        assert changed == 2
        assert a.position == 0
        assert await positions.audit_positions(test_session, project.id) == []
        assert (await board(test_session, project))[TaskStatus.TO_DO][0] == "a"

    @pytest.mark.asyncio
    async def test_healthy_column_is_untouched(self, test_session):
        project = await make_project(test_session)
        await add_task(test_session, project, "a")
        await add_task(test_session, project, "b")

        assert await positions.compact_column(test_session, project.id, TaskStatus.TO_DO) == 0
