"""
Pure board transforms used for optimistic updates.

Nothing here performs I/O or mutates its inputs: every function takes the
current task list and returns new values. The shift logic mirrors the
server's position engine so the optimistic board matches what the server
will compute in the common case; the server's answer still wins on the
next fetch.

Drop targets are identified the way a drag-and-drop toolkit reports them:
either a column id (the status string, for a drop on empty column space)
or a task id (for a drop over another card).
"""

import uuid
from dataclasses import dataclass
from typing import Sequence

from lanes.models import TaskStatus
from lanes.schemas import TaskRead
from lanes.services.positions import clamp_position

COLUMN_IDS = {status.value: status for status in TaskStatus}


@dataclass(frozen=True)
class DropTarget:
    status: TaskStatus
    position: int


def column_tasks(
    tasks: Sequence[TaskRead],
    status: TaskStatus,
    exclude_id: uuid.UUID | None = None,
) -> list[TaskRead]:
    """Tasks of one column sorted by position, optionally without one task."""
    return sorted(
        (t for t in tasks if t.status == status and t.id != exclude_id),
        key=lambda t: t.position,
    )


def find_task(tasks: Sequence[TaskRead], task_id) -> TaskRead | None:
    """Look a task up by id (UUID or its string form)."""
    return next((t for t in tasks if str(t.id) == str(task_id)), None)


def hovered_column(tasks: Sequence[TaskRead], over_id: str | None) -> TaskStatus | None:
    """Column under the pointer: the column itself, or the column of the hovered card."""
    if over_id is None:
        return None
    if over_id in COLUMN_IDS:
        return COLUMN_IDS[over_id]
    over_task = find_task(tasks, over_id)
    return over_task.status if over_task else None


def resolve_drop_target(
    tasks: Sequence[TaskRead],
    task_id: uuid.UUID,
    over_id: str | None,
) -> DropTarget | None:
    """
    Work out where a dropped task should land.

    - over a column: append to the end of that column
    - over a card: take that card's index in the column (moving task excluded)
    - over the dragged card itself: stay where it is

    A drop on the dragged card itself is a no-op. It is not treated as
    "card not found in the column" and so is never sent to the end of the
    column.

    Returns None when there is nothing to drop onto.
    """
    moving = find_task(tasks, task_id)
    if moving is None or over_id is None:
        return None

    if over_id in COLUMN_IDS:
        status = COLUMN_IDS[over_id]
        others = column_tasks(tasks, status, exclude_id=moving.id)
        return DropTarget(status, len(others))

    over_task = find_task(tasks, over_id)
    if over_task is None:
        return None
    if over_task.id == moving.id:
        return DropTarget(moving.status, moving.position)

    others = column_tasks(tasks, over_task.status, exclude_id=moving.id)
    index = next(i for i, t in enumerate(others) if t.id == over_task.id)
    return DropTarget(over_task.status, clamp_position(index, len(others)))


def apply_move(
    tasks: Sequence[TaskRead],
    task_id: uuid.UUID,
    status: TaskStatus,
    position: int,
) -> list[TaskRead]:
    """
    Return a new task list with ``task_id`` moved to (status, position).

    Both affected columns are renumbered 0..n-1. Tasks whose placement does
    not change are returned as the same objects; the input list and its
    items are never modified.
    """
    moving = find_task(tasks, task_id)
    if moving is None:
        return list(tasks)

    origin = column_tasks(tasks, moving.status, exclude_id=moving.id)
    if moving.status == status:
        destination = list(origin)
    else:
        destination = column_tasks(tasks, status, exclude_id=moving.id)

    position = clamp_position(position, len(destination))
    destination.insert(position, moving)

    placement: dict[uuid.UUID, tuple[TaskStatus, int]] = {}
    for index, task in enumerate(origin):
        placement[task.id] = (moving.status, index)
    for index, task in enumerate(destination):
        placement[task.id] = (status, index)

    moved = []
    for task in tasks:
        target = placement.get(task.id)
        if target is None or target == (task.status, task.position):
            moved.append(task)
        else:
            moved.append(task.model_copy(update={"status": target[0], "position": target[1]}))
    return moved
