"""
Tests for the pure optimistic-update transforms.
"""

import uuid
from datetime import datetime

from lanes.client.reconcile import (
    DropTarget,
    apply_move,
    column_tasks,
    hovered_column,
    resolve_drop_target,
)
from lanes.models import TaskPriority, TaskStatus
from lanes.schemas import TaskRead

PROJECT_ID = uuid.uuid4()


def make_task(title: str, status: TaskStatus, position: int) -> TaskRead:
    now = datetime(2025, 1, 1, 12, 0, 0)
    return TaskRead(
        id=uuid.uuid4(),
        project_id=PROJECT_ID,
        title=title,
        description=None,
        priority=TaskPriority.MEDIUM,
        status=status,
        position=position,
        created_by="alice",
        created_at=now,
        updated_at=now,
    )


def make_board():
    """TO_DO [x, y, z], IN_PROGRESS [p], DONE []"""
    return [
        make_task("x", TaskStatus.TO_DO, 0),
        make_task("y", TaskStatus.TO_DO, 1),
        make_task("z", TaskStatus.TO_DO, 2),
        make_task("p", TaskStatus.IN_PROGRESS, 0),
    ]


def by_title(tasks, title):
    return next(t for t in tasks if t.title == title)


def layout(tasks, status):
    return [(t.title, t.position) for t in column_tasks(tasks, status)]


class TestApplyMove:

    def test_cross_column(self):
        tasks = make_board()
        x = by_title(tasks, "x")

        moved = apply_move(tasks, x.id, TaskStatus.IN_PROGRESS, 0)

        assert layout(moved, TaskStatus.TO_DO) == [("y", 0), ("z", 1)]
        assert layout(moved, TaskStatus.IN_PROGRESS) == [("x", 0), ("p", 1)]

    def test_within_column(self):
        tasks = make_board()
        x = by_title(tasks, "x")

        moved = apply_move(tasks, x.id, TaskStatus.TO_DO, 2)

        assert layout(moved, TaskStatus.TO_DO) == [("y", 0), ("z", 1), ("x", 2)]

    def test_inputs_are_not_mutated(self):
        tasks = make_board()
        before = [(t.id, t.status, t.position) for t in tasks]
        original = list(tasks)

        apply_move(tasks, by_title(tasks, "x").id, TaskStatus.DONE, 0)

        assert tasks == original
        assert [(t.id, t.status, t.position) for t in tasks] == before

    def test_untouched_tasks_keep_identity(self):
        tasks = make_board()
        p = by_title(tasks, "p")

        moved = apply_move(tasks, by_title(tasks, "z").id, TaskStatus.DONE, 0)

        assert by_title(moved, "p") is p
        assert by_title(moved, "x") is by_title(tasks, "x")

    def test_position_is_clamped(self):
        tasks = make_board()

        moved = apply_move(tasks, by_title(tasks, "x").id, TaskStatus.IN_PROGRESS, 99)

        assert layout(moved, TaskStatus.IN_PROGRESS) == [("p", 0), ("x", 1)]

    def test_unknown_task(self):
        tasks = make_board()

        moved = apply_move(tasks, uuid.uuid4(), TaskStatus.DONE, 0)

        assert moved == tasks
        assert moved is not tasks


class TestResolveDropTarget:

    def test_over_column_appends(self):
        tasks = make_board()
        x = by_title(tasks, "x")

        assert resolve_drop_target(tasks, x.id, "IN_PROGRESS") == DropTarget(TaskStatus.IN_PROGRESS, 1)
        assert resolve_drop_target(tasks, x.id, "DONE") == DropTarget(TaskStatus.DONE, 0)

    def test_over_own_column_goes_to_end(self):
        tasks = make_board()
        x = by_title(tasks, "x")

        assert resolve_drop_target(tasks, x.id, "TO_DO") == DropTarget(TaskStatus.TO_DO, 2)

    def test_over_card_in_other_column(self):
        tasks = make_board()
        z = by_title(tasks, "z")
        p = by_title(tasks, "p")

        assert resolve_drop_target(tasks, z.id, str(p.id)) == DropTarget(TaskStatus.IN_PROGRESS, 0)

    def test_over_card_in_same_column(self):
        tasks = make_board()
        x = by_title(tasks, "x")
        z = by_title(tasks, "z")

        # z's index once x is taken out of the column
        assert resolve_drop_target(tasks, x.id, str(z.id)) == DropTarget(TaskStatus.TO_DO, 1)

    def test_over_itself_stays_put(self):
        tasks = make_board()
        y = by_title(tasks, "y")

        assert resolve_drop_target(tasks, y.id, str(y.id)) == DropTarget(TaskStatus.TO_DO, 1)

    def test_nothing_to_drop_onto(self):
        tasks = make_board()
        x = by_title(tasks, "x")

        assert resolve_drop_target(tasks, x.id, None) is None
        assert resolve_drop_target(tasks, x.id, str(uuid.uuid4())) is None
        assert resolve_drop_target(tasks, uuid.uuid4(), "DONE") is None


class TestHoveredColumn:

    def test_column_and_card(self):
        tasks = make_board()

        assert hovered_column(tasks, "DONE") == TaskStatus.DONE
        assert hovered_column(tasks, str(by_title(tasks, "p").id)) == TaskStatus.IN_PROGRESS

    def test_nothing_hovered(self):
        assert hovered_column(make_board(), None) is None
        assert hovered_column(make_board(), "nowhere") is None
