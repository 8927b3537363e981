import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field, Relationship

from lanes.roles import Role

if TYPE_CHECKING:
    from lanes.models.project import Project


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class Invitation(SQLModel, table=True):
    """
    Invitation to join a project.

    Lifecycle: PENDING -> ACCEPTED | DECLINED. Both outcomes are terminal.
    At most one PENDING invitation exists per (project, invitee).
    """

    __tablename__ = "invitations"
    __table_args__ = (
        Index(
            "uq_invitations_pending",
            "project_id",
            "invitee_id",
            unique=True,
            postgresql_where=text("status = 'PENDING'"),
            sqlite_where=text("status = 'PENDING'"),
        ),
        Index("ix_invitations_invitee_status", "invitee_id", "status"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", ondelete="CASCADE")
    inviter_id: str = Field(foreign_key="users.id", ondelete="CASCADE")
    invitee_id: str = Field(foreign_key="users.id", ondelete="CASCADE")
    role: Role = Field(default=Role.MEMBER)
    status: InvitationStatus = Field(default=InvitationStatus.PENDING)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    project: "Project" = Relationship(back_populates="invitations")
