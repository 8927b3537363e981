"""
User routes for the Lanes API.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lanes.auth import AuthenticatedUser, get_current_user
from lanes.database import get_session
from lanes.models import User
from lanes.schemas import UserRead, UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """The caller's profile as recorded from their identity token."""
    record = await session.get(User, user.uid)
    return UserResponse(user=UserRead.model_validate(record))
