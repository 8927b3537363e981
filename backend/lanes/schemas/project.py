import uuid
from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator
from pydantic_core import PydanticCustomError

from lanes.roles import Role
from lanes.schemas.common import ProjectName, normalize_description


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""
    name: ProjectName
    description: str | None = None

    clean_description = field_validator("description")(normalize_description)


class ProjectUpdate(BaseModel):
    """Schema for updating a project."""
    name: ProjectName | None = None
    description: str | None = None

    clean_description = field_validator("description")(normalize_description)

    @model_validator(mode="after")
    def check_fields(self) -> "ProjectUpdate":
        if not self.model_fields_set & {"name", "description"}:
            raise PydanticCustomError("missing_fields", "Provide at least one of: name, description")
        if "name" in self.model_fields_set and self.name is None:
            raise PydanticCustomError("name_required", "Project name must be 1-100 characters")
        return self


class ProjectRead(BaseModel):
    """A project as seen by one member: includes that member's role."""
    id: uuid.UUID
    name: str
    description: str | None
    created_by: str
    role: Role
    is_owner: bool
    created_at: datetime
    updated_at: datetime


class ProjectResponse(BaseModel):
    project: ProjectRead


class ProjectListResponse(BaseModel):
    projects: list[ProjectRead]


class MemberRead(BaseModel):
    user_id: str
    email: str | None
    display_name: str
    role: Role
    is_owner: bool


class MemberRoleUpdate(BaseModel):
    role: Role


class MemberResponse(BaseModel):
    member: MemberRead


class MemberListResponse(BaseModel):
    members: list[MemberRead]
