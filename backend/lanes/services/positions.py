"""
Position maintenance for board columns.

A column is the set of tasks sharing one (project_id, status) pair. Every
column keeps its positions densely packed: a column of n tasks holds
exactly the positions 0..n-1, with no gaps and no duplicates.

Each operation here runs inside the caller's transaction (one request =
one session = one transaction, see lanes.database.get_session) so other
transactions never observe a half-shifted column:

- insert_task: append at max(position) + 1 of the target column
- remove_task: delete, then close the gap behind the removed slot
- move_task:   relocate within a column (shift only the affected range)
               or across columns (close the gap in the old column, open
               a slot in the new one)

Every operation first locks the owning project row. That serializes all
position arithmetic for one project, so two concurrent moves into the
same column cannot both open the same slot. The moving task's own row is
additionally read FOR UPDATE so its (status, position) cannot go stale
while the shift ranges are computed.

Requested positions are clamped, never rejected: a move lands at
min(requested, number of other tasks in the destination column).
Negative or non-integer positions are rejected earlier, by the request
schema.
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lanes.models import Project, Task, TaskStatus, STATUS_ORDER
from lanes.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ColumnReport:
    """Positions found in a column that breaks the density invariant."""
    project_id: uuid.UUID
    status: TaskStatus
    positions: list[int]

    @property
    def expected(self) -> list[int]:
        return list(range(len(self.positions)))


def clamp_position(requested: int, column_size: int) -> int:
    """
    Clamp a requested slot into [0, column_size].

    ``column_size`` counts the destination column without the moving task,
    so the upper bound means "append at the end".
    """
    return max(0, min(requested, column_size))


def board_order():
    """ORDER BY clause for a whole board: column left to right, then position."""
    status_rank = case(
        *[(Task.status == status, rank) for rank, status in enumerate(STATUS_ORDER)],
        else_=len(STATUS_ORDER),
    )
    return (status_rank, Task.position.asc(), Task.id.asc())


async def lock_project(session: AsyncSession, project_id: uuid.UUID) -> None:
    """Take the per-project row lock that serializes position changes."""
    await session.execute(
        select(Project.id).where(Project.id == project_id).with_for_update()
    )


async def column_size(
    session: AsyncSession,
    project_id: uuid.UUID,
    status: TaskStatus,
    exclude_task_id: uuid.UUID | None = None,
) -> int:
    """Count tasks in a column, optionally leaving one task out."""
    query = select(func.count()).select_from(Task).where(
        Task.project_id == project_id,
        Task.status == status,
    )
    if exclude_task_id is not None:
        query = query.where(Task.id != exclude_task_id)

    result = await session.execute(query)
    return result.scalar_one()


async def next_position(
    session: AsyncSession,
    project_id: uuid.UUID,
    status: TaskStatus,
) -> int:
    """Slot after the last task in the column (0 for an empty column)."""
    result = await session.execute(
        select(func.max(Task.position)).where(
            Task.project_id == project_id,
            Task.status == status,
        )
    )
    max_position = result.scalar_one_or_none()
    return 0 if max_position is None else max_position + 1


async def _shift(
    session: AsyncSession,
    project_id: uuid.UUID,
    status: TaskStatus,
    delta: int,
    *conditions,
) -> int:
    """Add ``delta`` to the position of every task in the column matching ``conditions``."""
    result = await session.execute(
        update(Task)
        .where(Task.project_id == project_id, Task.status == status, *conditions)
        .values(position=Task.position + delta)
    )
    return result.rowcount


async def _get_task_for_update(
    session: AsyncSession,
    task_id: uuid.UUID,
    project_id: uuid.UUID | None = None,
) -> Task | None:
    query = select(Task).where(Task.id == task_id)
    if project_id is not None:
        query = query.where(Task.project_id == project_id)
    query = query.with_for_update().execution_options(populate_existing=True)

    result = await session.execute(query)
    return result.scalars().first()


async def insert_task(session: AsyncSession, task: Task) -> Task:
    """
    Add a new task at the end of its column.

    No existing task is renumbered.
    """
    await lock_project(session, task.project_id)

    task.position = await next_position(session, task.project_id, task.status)
    session.add(task)
    await session.flush()
    await session.refresh(task)

    logger.debug(
        f"Inserted task {task.id} at {task.status.value}[{task.position}] "
        f"project={task.project_id}"
    )
    return task


async def remove_task(session: AsyncSession, task_id: uuid.UUID) -> bool:
    """
    Delete a task and close the gap it leaves in its column.

    Returns False if the task does not exist.
    """
    task = await session.get(Task, task_id)
    if task is None:
        return False

    await lock_project(session, task.project_id)

    # Re-read under the lock; a concurrent move may have relocated it
    task = await _get_task_for_update(session, task_id)
    if task is None:
        return False

    project_id, status, position = task.project_id, task.status, task.position

    await session.delete(task)
    await session.flush()

    shifted = await _shift(session, project_id, status, -1, Task.position > position)

    logger.debug(
        f"Removed task {task_id} from {status.value}[{position}], "
        f"closed gap over {shifted} tasks"
    )
    return True


async def move_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    project_id: uuid.UUID,
    new_status: TaskStatus,
    requested_position: int,
) -> Task | None:
    """
    Relocate a task to ``requested_position`` in the ``new_status`` column.

    Within a column (old position o, clamped target t):
      o < t: tasks in (o, t] move up one slot (position - 1)
      o > t: tasks in [t, o) move down one slot (position + 1)
      o == t: nothing changes

    Across columns:
      old column: tasks after o close the gap (position - 1)
      new column: tasks at or after t open a slot (position + 1)

    Only the affected ranges are written. The returned task reflects its
    final (status, position); positions of neighbours change as a side
    effect and callers must re-read the board to see them.

    Returns None if the task does not exist in ``project_id``.
    """
    await lock_project(session, project_id)

    task = await _get_task_for_update(session, task_id, project_id)
    if task is None:
        return None

    old_status = task.status
    old_position = task.position

    others = await column_size(session, project_id, new_status, exclude_task_id=task_id)
    target = clamp_position(requested_position, others)

    if old_status == new_status:
        if old_position == target:
            logger.debug(f"Move of task {task_id} is a no-op ({old_status.value}[{target}])")
            return task

        if old_position < target:
            await _shift(
                session, project_id, old_status, -1,
                Task.position > old_position,
                Task.position <= target,
            )
        else:
            await _shift(
                session, project_id, old_status, +1,
                Task.position >= target,
                Task.position < old_position,
            )
    else:
        # The two columns are disjoint, so the order of these shifts is free
        await _shift(session, project_id, old_status, -1, Task.position > old_position)
        await _shift(session, project_id, new_status, +1, Task.position >= target)

    task.status = new_status
    task.position = target
    task.updated_at = datetime.utcnow()
    await session.flush()
    await session.refresh(task)

    logger.debug(
        f"Moved task {task_id}: {old_status.value}[{old_position}] -> "
        f"{new_status.value}[{target}] (requested {requested_position})"
    )
    return task


async def list_tasks(session: AsyncSession, project_id: uuid.UUID) -> list[Task]:
    """All tasks of a project in board order (column, then position)."""
    result = await session.execute(
        select(Task)
        .where(Task.project_id == project_id)
        .order_by(*board_order())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def audit_positions(
    session: AsyncSession,
    project_id: uuid.UUID | None = None,
) -> list[ColumnReport]:
    """
    Find columns whose positions are not exactly 0..n-1.

    Scans one project, or every project when ``project_id`` is None.
    """
    query = select(Task.project_id, Task.status, Task.position)
    if project_id is not None:
        query = query.where(Task.project_id == project_id)

    result = await session.execute(query)

    columns: dict[tuple[uuid.UUID, TaskStatus], list[int]] = defaultdict(list)
    for row_project_id, status, position in result.all():
        columns[(row_project_id, status)].append(position)

    reports = []
    for (column_project_id, status), positions in columns.items():
        positions.sort()
        if positions != list(range(len(positions))):
            reports.append(ColumnReport(column_project_id, status, positions))

    return reports


async def compact_column(
    session: AsyncSession,
    project_id: uuid.UUID,
    status: TaskStatus,
) -> int:
    """
    Renumber a column to 0..n-1, keeping its current relative order.

    Ties on position are broken by creation time, then id. Returns the
    number of tasks whose position changed.
    """
    await lock_project(session, project_id)

    result = await session.execute(
        select(Task)
        .where(Task.project_id == project_id, Task.status == status)
        .order_by(Task.position, Task.created_at, Task.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    tasks = list(result.scalars().all())

    changed = 0
    for index, task in enumerate(tasks):
        if task.position != index:
            task.position = index
            changed += 1

    await session.flush()

    if changed:
        logger.info(f"Compacted {status.value} column of project {project_id}: {changed} tasks renumbered")
    return changed
