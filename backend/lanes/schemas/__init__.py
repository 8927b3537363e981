from lanes.schemas.project import (
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
from lanes.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskMove,
    TaskRead,
    TaskResponse,
    TaskListResponse,
)
from lanes.schemas.invitation import (
    InvitationCreate,
    InvitationRead,
    InvitationDetail,
    InvitationResponse,
    InvitationListResponse,
)
from lanes.schemas.user import UserRead, UserResponse

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "ProjectResponse",
    "ProjectListResponse",
    "MemberRead",
    "MemberRoleUpdate",
    "MemberResponse",
    "MemberListResponse",
    "TaskCreate",
    "TaskUpdate",
    "TaskMove",
    "TaskRead",
    "TaskResponse",
    "TaskListResponse",
    "InvitationCreate",
    "InvitationRead",
    "InvitationDetail",
    "InvitationResponse",
    "InvitationListResponse",
    "UserRead",
    "UserResponse",
]
