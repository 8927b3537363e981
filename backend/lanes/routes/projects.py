"""
Project and membership routes for the Lanes API.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lanes.auth import AuthenticatedUser, get_current_user
from lanes.database import get_session
from lanes.models import Membership, Project, User
from lanes.permissions import ProjectAccess, project_member, require_role
from lanes.roles import Role
from lanes.schemas import (
    ProjectCreate,
    ProjectUpdate,
    ProjectRead,
    ProjectResponse,
    ProjectListResponse,
    MemberRead,
    MemberRoleUpdate,
    MemberResponse,
    MemberListResponse,
)
from lanes.exceptions import NotFoundError, OwnerRoleChangeError
from lanes.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


def project_read(project: Project, role: Role, user_id: str) -> ProjectRead:
    """A project as seen by ``user_id``; ownership is derived, not stored."""
    return ProjectRead(
        id=project.id,
        name=project.name,
        description=project.description,
        created_by=project.created_by,
        role=role,
        is_owner=project.created_by == user_id,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


async def get_project(session: AsyncSession, access: ProjectAccess) -> Project:
    project = await session.get(Project, access.project_id)
    if not project:
        raise NotFoundError("Project", str(access.project_id))
    return project


async def list_members(session: AsyncSession, project: Project) -> list[MemberRead]:
    """Members of a project: owner first, then by display name."""
    result = await session.execute(
        select(Membership, User)
        .join(User, User.id == Membership.user_id)
        .where(Membership.project_id == project.id)
    )
    members = [
        MemberRead(
            user_id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=membership.role,
            is_owner=user.id == project.created_by,
        )
        for membership, user in result.all()
    ]
    members.sort(key=lambda m: (not m.is_owner, m.display_name, m.user_id))
    return members


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectListResponse:
    """List the projects the caller belongs to, most recently updated first."""
    result = await session.execute(
        select(Project, Membership.role)
        .join(Membership, Membership.project_id == Project.id)
        .where(Membership.user_id == user.uid)
        .order_by(Project.updated_at.desc(), Project.id.desc())
    )
    projects = [project_read(project, role, user.uid) for project, role in result.all()]

    logger.debug(f"Listed {len(projects)} projects for user={user.uid}")

    return ProjectListResponse(projects=projects)


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    """Create a new project. The creator becomes its owner with the ADMIN role."""
    project = Project(**project_in.model_dump(), created_by=user.uid)
    session.add(project)
    await session.flush()

    session.add(Membership(project_id=project.id, user_id=user.uid, role=Role.ADMIN))
    await session.flush()
    await session.refresh(project)

    logger.info(f"Created project: id={project.id} name='{project.name}' owner={user.uid}")

    return ProjectResponse(project=project_read(project, Role.ADMIN, user.uid))


@router.get("/{project_id}", response_model=ProjectResponse)
async def read_project(
    access: ProjectAccess = Depends(project_member),
    session: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    """Get a project by ID."""
    project = await get_project(session, access)
    return ProjectResponse(project=project_read(project, access.role, access.user.uid))


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_in: ProjectUpdate,
    access: ProjectAccess = Depends(require_role(Role.ADMIN)),
    session: AsyncSession = Depends(get_session),
) -> ProjectResponse:
    """Update a project."""
    project = await get_project(session, access)

    update_data = project_in.model_dump(exclude_unset=True)

    logger.info(f"Updating project {project.id}: {update_data}")

    for field, value in update_data.items():
        setattr(project, field, value)

    project.updated_at = datetime.utcnow()
    await session.flush()
    await session.refresh(project)
    return ProjectResponse(project=project_read(project, access.role, access.user.uid))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    access: ProjectAccess = Depends(require_role(Role.ADMIN)),
    session: AsyncSession = Depends(get_session),
) -> None:
    """Delete a project with all its tasks, memberships and invitations."""
    project = await get_project(session, access)

    logger.info(f"Deleting project {project.id}: '{project.name}'")

    await session.delete(project)
    await session.flush()


@router.get("/{project_id}/members", response_model=MemberListResponse)
async def read_members(
    access: ProjectAccess = Depends(project_member),
    session: AsyncSession = Depends(get_session),
) -> MemberListResponse:
    """List project members."""
    project = await get_project(session, access)
    return MemberListResponse(members=await list_members(session, project))


@router.patch("/{project_id}/members/{user_id}", response_model=MemberResponse)
async def update_member_role(
    user_id: str,
    role_in: MemberRoleUpdate,
    access: ProjectAccess = Depends(require_role(Role.ADMIN)),
    session: AsyncSession = Depends(get_session),
) -> MemberResponse:
    """
    Change a member's role.

    The owner's role is fixed; no admin can change it.
    """
    project = await get_project(session, access)

    if user_id == project.created_by:
        logger.warning(f"Rejected role change for owner of project {project.id}")
        raise OwnerRoleChangeError()

    result = await session.execute(
        select(Membership).where(
            Membership.project_id == project.id,
            Membership.user_id == user_id,
        )
    )
    membership = result.scalars().first()
    if not membership:
        raise NotFoundError("Project member", user_id)

    logger.info(
        f"Changing role of {user_id} in project {project.id}: "
        f"{membership.role.value} -> {role_in.role.value}"
    )

    membership.role = role_in.role
    await session.flush()

    members = await list_members(session, project)
    member = next(m for m in members if m.user_id == user_id)
    return MemberResponse(member=member)
