from lanes.models.user import User
from lanes.models.project import Project
from lanes.models.membership import Membership
from lanes.models.invitation import Invitation, InvitationStatus
from lanes.models.task import Task, TaskPriority, TaskStatus, STATUS_ORDER

__all__ = [
    "User",
    "Project",
    "Membership",
    "Invitation",
    "InvitationStatus",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "STATUS_ORDER",
]
