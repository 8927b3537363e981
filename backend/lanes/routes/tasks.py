"""
Task routes for the Lanes API.

Project-scoped routes (list, create) resolve membership from the project id
in the path; task-scoped routes resolve it through the task's project.
Ordering math lives in lanes.services.positions.
"""

import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lanes.database import get_session
from lanes.models import Task
from lanes.permissions import ProjectAccess, project_member, require_role, task_project_member
from lanes.roles import Role
from lanes.schemas import TaskCreate, TaskUpdate, TaskMove, TaskRead, TaskResponse, TaskListResponse
from lanes.services import positions
from lanes.exceptions import NotFoundError
from lanes.logging_config import get_logger

logger = get_logger(__name__)

# Mounted under /projects
project_router = APIRouter()

# Mounted under /tasks
router = APIRouter()


async def get_project_task(
    session: AsyncSession,
    task_id: uuid.UUID,
    project_id: uuid.UUID,
) -> Task:
    """
    Load a task that belongs to ``project_id``.

    A task in some other project is reported exactly like a missing one.
    """
    result = await session.execute(
        select(Task).where(Task.id == task_id, Task.project_id == project_id)
    )
    task = result.scalars().first()
    if not task:
        raise NotFoundError("Task", str(task_id))
    return task


@project_router.get("/{project_id}/tasks", response_model=TaskListResponse)
async def list_tasks(
    access: ProjectAccess = Depends(project_member),
    session: AsyncSession = Depends(get_session),
) -> TaskListResponse:
    """List a project's tasks ordered by column, then position."""
    tasks = await positions.list_tasks(session, access.project_id)

    logger.debug(f"Listed {len(tasks)} tasks for project={access.project_id}")

    return TaskListResponse(tasks=[TaskRead.model_validate(task) for task in tasks])


@project_router.post(
    "/{project_id}/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    task_in: TaskCreate,
    access: ProjectAccess = Depends(require_role(Role.MEMBER)),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    """
    Create a new task.

    The task is appended to the end of its column (TO_DO unless given).
    """
    task = Task(
        **task_in.model_dump(),
        project_id=access.project_id,
        created_by=access.user.uid,
    )
    task = await positions.insert_task(session, task)

    logger.info(
        f"Created task: id={task.id} title='{task.title}' project={task.project_id} "
        f"at {task.status.value}[{task.position}]"
    )

    return TaskResponse(task=TaskRead.model_validate(task))


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: uuid.UUID,
    access: ProjectAccess = Depends(task_project_member),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    """Get a task by ID."""
    task = await get_project_task(session, task_id, access.project_id)
    return TaskResponse(task=TaskRead.model_validate(task))


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    access: ProjectAccess = Depends(require_role(Role.MEMBER, task_project_member)),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    """
    Edit a task's title, description or priority.

    Never touches status or position.
    """
    task = await get_project_task(session, task_id, access.project_id)

    update_data = task_in.changes()

    logger.info(f"Updating task {task_id}: {update_data}")

    for field, value in update_data.items():
        setattr(task, field, value)

    task.updated_at = datetime.utcnow()
    await session.flush()
    await session.refresh(task)

    return TaskResponse(task=TaskRead.model_validate(task))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    access: ProjectAccess = Depends(require_role(Role.MEMBER, task_project_member)),
    session: AsyncSession = Depends(get_session),
) -> None:
    """
    Delete a task.

    Tasks below it in the same column move up one slot.
    """
    task = await get_project_task(session, task_id, access.project_id)

    logger.info(f"Deleting task {task_id}: '{task.title}'")

    if not await positions.remove_task(session, task_id):
        raise NotFoundError("Task", str(task_id))


@router.patch("/{task_id}/move", response_model=TaskResponse)
async def move_task(
    task_id: uuid.UUID,
    move_in: TaskMove,
    access: ProjectAccess = Depends(require_role(Role.MEMBER, task_project_member)),
    session: AsyncSession = Depends(get_session),
) -> TaskResponse:
    """
    Move a task to a column and slot.

    The position is clamped to the destination column. Only the moved task
    is returned; clients re-fetch the board to see shifted neighbours.
    """
    await get_project_task(session, task_id, access.project_id)

    task = await positions.move_task(
        session,
        task_id,
        access.project_id,
        move_in.status,
        move_in.position,
    )
    if task is None:
        raise NotFoundError("Task", str(task_id))

    logger.info(
        f"Moved task {task_id} to {task.status.value}[{task.position}] "
        f"(requested {move_in.position}) by {access.user.uid}"
    )

    return TaskResponse(task=TaskRead.model_validate(task))
