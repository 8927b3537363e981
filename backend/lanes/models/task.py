import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from sqlalchemy import Index
from sqlmodel import SQLModel, Field, Relationship

if TYPE_CHECKING:
    from lanes.models.project import Project


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class TaskStatus(str, Enum):
    """The board column a task sits in."""
    TO_DO = "TO_DO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


# Left-to-right column order on the board
STATUS_ORDER: tuple[TaskStatus, ...] = (
    TaskStatus.TO_DO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
)


class Task(SQLModel, table=True):
    """
    Task model.

    Key fields:
    - status: the column the task lives in
    - position: zero-based slot within (project_id, status). Positions in a
      column are always exactly 0..n-1; see lanes.services.positions.
    """

    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_column_position", "project_id", "status", "position"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=255)
    description: str | None = Field(default=None)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    status: TaskStatus = Field(default=TaskStatus.TO_DO)
    position: int = Field(default=0, ge=0)

    # Foreign keys
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    created_by: str = Field(foreign_key="users.id")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    project: "Project" = Relationship(back_populates="tasks")
