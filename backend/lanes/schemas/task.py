import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from lanes.models import TaskPriority, TaskStatus
from lanes.schemas.common import TaskTitle, normalize_description


class TaskCreate(BaseModel):
    """Schema for creating a new task. It is appended to the end of its column."""
    title: TaskTitle
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.TO_DO

    clean_description = field_validator("description")(normalize_description)


class TaskUpdate(BaseModel):
    """
    Schema for editing a task.

    Status and position are not editable here; use the move endpoint.
    """
    title: TaskTitle | None = None
    description: str | None = None
    priority: TaskPriority | None = None

    clean_description = field_validator("description")(normalize_description)

    @model_validator(mode="after")
    def check_fields(self) -> "TaskUpdate":
        if not self.model_fields_set & {"title", "description", "priority"}:
            raise PydanticCustomError(
                "missing_fields",
                "Provide at least one of: title, description, priority",
            )
        if "title" in self.model_fields_set and self.title is None:
            raise PydanticCustomError("title_required", "Title must be 1-255 characters")
        if "priority" in self.model_fields_set and self.priority is None:
            raise PydanticCustomError("priority_required", "Priority must be LOW, MEDIUM, or HIGH")
        return self

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(include={"title", "description", "priority"}, exclude_unset=True)


class TaskMove(BaseModel):
    """Target column and slot for a move. Out-of-range slots are clamped server-side."""
    status: TaskStatus
    position: Annotated[int, Field(ge=0, strict=True)]


class TaskRead(BaseModel):
    """Schema for reading a task."""
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    priority: TaskPriority
    status: TaskStatus
    position: int
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskResponse(BaseModel):
    task: TaskRead


class TaskListResponse(BaseModel):
    tasks: list[TaskRead]
