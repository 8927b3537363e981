import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from lanes.roles import Role

if TYPE_CHECKING:
    from lanes.models.project import Project
    from lanes.models.user import User


class Membership(SQLModel, table=True):
    """
    A user's role in one project.

    Ownership is not stored here: a membership is the owner's when
    user_id == project.created_by.
    """

    __tablename__ = "project_memberships"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_memberships_project_user"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    role: Role = Field(default=Role.MEMBER)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    project: "Project" = Relationship(back_populates="memberships")
    user: "User" = Relationship()
