import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator

from lanes.models import InvitationStatus
from lanes.roles import Role, INVITABLE_ROLES
from lanes.schemas.common import Email


class InvitationCreate(BaseModel):
    """Invite an existing user, by email, as MEMBER or VIEWER."""
    email: Email
    role: Role

    @field_validator("role")
    @classmethod
    def check_role(cls, value: Role) -> Role:
        if value not in INVITABLE_ROLES:
            raise ValueError("Role must be MEMBER or VIEWER")
        return value


class InvitationRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    inviter_id: str
    invitee_id: str
    role: Role
    status: InvitationStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class InvitationDetail(BaseModel):
    """A pending invitation as shown to the invitee."""
    id: uuid.UUID
    project_id: uuid.UUID
    project_name: str
    inviter_id: str
    inviter_name: str
    role: Role
    status: InvitationStatus
    created_at: datetime


class InvitationResponse(BaseModel):
    invitation: InvitationRead


class InvitationListResponse(BaseModel):
    invitations: list[InvitationDetail]
