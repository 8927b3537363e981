"""
Invitation routes for the Lanes API.

ADMINs invite existing users by email; only the invitee can accept or
decline, and only once.
"""

import uuid
from datetime import datetime
from fastapi import APIRouter, Depends, status
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from lanes.auth import AuthenticatedUser, get_current_user
from lanes.database import get_session
from lanes.models import Invitation, InvitationStatus, Membership, Project, User
from lanes.permissions import ProjectAccess, get_membership_role, require_role
from lanes.roles import Role
from lanes.schemas import (
    InvitationCreate,
    InvitationRead,
    InvitationDetail,
    InvitationResponse,
    InvitationListResponse,
)
from lanes.exceptions import (
    AlreadyMemberError,
    DuplicateInvitationError,
    ForbiddenError,
    InvitationProcessedError,
    NotFoundError,
    SelfInvitationError,
)
from lanes.logging_config import get_logger

logger = get_logger(__name__)

# Mounted under /projects
project_router = APIRouter()

# Mounted under /invites
router = APIRouter()


async def get_pending_invitation(
    session: AsyncSession,
    invitation_id: uuid.UUID,
    user: AuthenticatedUser,
) -> Invitation:
    """Load an invitation addressed to ``user`` that has not been answered yet."""
    result = await session.execute(
        select(Invitation)
        .where(Invitation.id == invitation_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    invitation = result.scalars().first()
    if not invitation:
        raise NotFoundError("Invitation", str(invitation_id))

    if invitation.invitee_id != user.uid:
        logger.warning(f"User {user.uid} tried to answer invitation {invitation_id}")
        raise ForbiddenError()

    if invitation.status != InvitationStatus.PENDING:
        raise InvitationProcessedError()

    return invitation


@project_router.post(
    "/{project_id}/invites",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invitation(
    invite_in: InvitationCreate,
    access: ProjectAccess = Depends(require_role(Role.ADMIN)),
    session: AsyncSession = Depends(get_session),
) -> InvitationResponse:
    """Invite a registered user to the project as MEMBER or VIEWER."""
    result = await session.execute(
        select(User).where(func.lower(User.email) == invite_in.email.lower())
    )
    invitee = result.scalars().first()
    if not invitee:
        raise NotFoundError("User", invite_in.email)

    if invitee.id == access.user.uid:
        raise SelfInvitationError()

    if await get_membership_role(session, access.project_id, invitee.id) is not None:
        raise AlreadyMemberError()

    pending = await session.execute(
        select(Invitation.id).where(
            Invitation.project_id == access.project_id,
            Invitation.invitee_id == invitee.id,
            Invitation.status == InvitationStatus.PENDING,
        )
    )
    if pending.first() is not None:
        raise DuplicateInvitationError()

    invitation = Invitation(
        project_id=access.project_id,
        inviter_id=access.user.uid,
        invitee_id=invitee.id,
        role=invite_in.role,
    )
    session.add(invitation)
    try:
        await session.flush()
    except IntegrityError:
        # Lost a race with a concurrent invite for the same user
        raise DuplicateInvitationError()
    await session.refresh(invitation)

    logger.info(
        f"Invited {invitee.id} to project {access.project_id} as {invitation.role.value} "
        f"(invitation={invitation.id})"
    )

    return InvitationResponse(invitation=InvitationRead.model_validate(invitation))


@router.get("", response_model=InvitationListResponse)
async def list_pending_invitations(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> InvitationListResponse:
    """The caller's pending invitations, newest first."""
    result = await session.execute(
        select(Invitation, Project.name, User.display_name)
        .join(Project, Project.id == Invitation.project_id)
        .join(User, User.id == Invitation.inviter_id)
        .where(
            Invitation.invitee_id == user.uid,
            Invitation.status == InvitationStatus.PENDING,
        )
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
    )

    invitations = [
        InvitationDetail(
            id=invitation.id,
            project_id=invitation.project_id,
            project_name=project_name,
            inviter_id=invitation.inviter_id,
            inviter_name=inviter_name,
            role=invitation.role,
            status=invitation.status,
            created_at=invitation.created_at,
        )
        for invitation, project_name, inviter_name in result.all()
    ]

    logger.debug(f"Listed {len(invitations)} pending invitations for user={user.uid}")

    return InvitationListResponse(invitations=invitations)


@router.post("/{invitation_id}/accept", response_model=InvitationResponse)
async def accept_invitation(
    invitation_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> InvitationResponse:
    """Accept an invitation; the membership is created in the same transaction."""
    invitation = await get_pending_invitation(session, invitation_id, user)

    invitation.status = InvitationStatus.ACCEPTED
    invitation.updated_at = datetime.utcnow()

    if await get_membership_role(session, invitation.project_id, user.uid) is None:
        session.add(
            Membership(
                project_id=invitation.project_id,
                user_id=user.uid,
                role=invitation.role,
            )
        )

    await session.flush()
    await session.refresh(invitation)

    logger.info(
        f"User {user.uid} joined project {invitation.project_id} "
        f"as {invitation.role.value} (invitation={invitation.id})"
    )

    return InvitationResponse(invitation=InvitationRead.model_validate(invitation))


@router.post("/{invitation_id}/decline", response_model=InvitationResponse)
async def decline_invitation(
    invitation_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> InvitationResponse:
    """Decline an invitation."""
    invitation = await get_pending_invitation(session, invitation_id, user)

    invitation.status = InvitationStatus.DECLINED
    invitation.updated_at = datetime.utcnow()
    await session.flush()
    await session.refresh(invitation)

    logger.info(f"User {user.uid} declined invitation {invitation.id}")

    return InvitationResponse(invitation=InvitationRead.model_validate(invitation))
