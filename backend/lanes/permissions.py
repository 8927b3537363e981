"""
Project authorization gate.

Two stages run before any project-scoped handler:

1. Membership resolution binds the caller to a project and a role.
   - directly, from a project id in the path
   - indirectly, from a task id in the path (task -> project -> membership)
   A caller without a membership gets 404, exactly as if the project (or
   task) did not exist.

2. The role floor check compares the bound role against the minimum the
   route requires and fails with 403 naming that role.

The binding is a ProjectAccess value handed from stage 1 to stage 2 and on
to the handler; nothing is stored in request-global state.
"""

import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lanes.auth import AuthenticatedUser, get_current_user
from lanes.database import get_session
from lanes.exceptions import InsufficientRoleError, NotFoundError
from lanes.models import Membership, Task
from lanes.roles import Role, at_least
from lanes.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProjectAccess:
    """The caller's resolved membership for one project."""
    project_id: uuid.UUID
    role: Role
    user: AuthenticatedUser


async def get_membership_role(
    session: AsyncSession,
    project_id: uuid.UUID,
    user_id: str,
) -> Role | None:
    result = await session.execute(
        select(Membership.role).where(
            Membership.project_id == project_id,
            Membership.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def resolve_project_access(
    session: AsyncSession,
    project_id: uuid.UUID,
    user: AuthenticatedUser,
) -> ProjectAccess:
    """Bind the caller to ``project_id``. Raises NotFoundError without a membership."""
    role = await get_membership_role(session, project_id, user.uid)
    if role is None:
        logger.warning(f"User {user.uid} has no membership in project {project_id}")
        raise NotFoundError("Project", str(project_id))
    return ProjectAccess(project_id=project_id, role=role, user=user)


async def resolve_task_access(
    session: AsyncSession,
    task_id: uuid.UUID,
    user: AuthenticatedUser,
) -> ProjectAccess:
    """Bind the caller to the project owning ``task_id``."""
    result = await session.execute(select(Task.project_id).where(Task.id == task_id))
    project_id = result.scalar_one_or_none()
    if project_id is None:
        raise NotFoundError("Task", str(task_id))

    role = await get_membership_role(session, project_id, user.uid)
    if role is None:
        logger.warning(f"User {user.uid} has no membership in the project of task {task_id}")
        raise NotFoundError("Task", str(task_id))
    return ProjectAccess(project_id=project_id, role=role, user=user)


def check_role(access: ProjectAccess | None, minimum: Role) -> ProjectAccess:
    """
    Enforce the role floor on a resolved binding.

    A missing binding means the route skipped membership resolution, which
    is a wiring bug rather than a client error.
    """
    if access is None:
        raise RuntimeError("Role check requires a resolved project membership")

    if not at_least(access.role, minimum):
        logger.warning(
            f"User {access.user.uid} has {access.role.value} in project "
            f"{access.project_id}, {minimum.value} required"
        )
        raise InsufficientRoleError(minimum.value)

    return access


# =============================================================================
# FastAPI dependencies
# =============================================================================

async def project_member(
    project_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectAccess:
    """Direct resolution from the ``project_id`` path parameter."""
    return await resolve_project_access(session, project_id, user)


async def task_project_member(
    task_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectAccess:
    """Indirect resolution from the ``task_id`` path parameter."""
    return await resolve_task_access(session, task_id, user)


def require_role(
    minimum: Role,
    resolver: Callable[..., Awaitable[ProjectAccess]] = project_member,
):
    """
    Dependency factory: resolve membership with ``resolver``, then enforce ``minimum``.

    Usage:
        access: ProjectAccess = Depends(require_role(Role.MEMBER, task_project_member))
    """

    async def dependency(access: ProjectAccess = Depends(resolver)) -> ProjectAccess:
        return check_role(access, minimum)

    return dependency
