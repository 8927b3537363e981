from datetime import datetime

from pydantic import BaseModel


class UserRead(BaseModel):
    id: str
    email: str | None
    display_name: str
    created_at: datetime

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    user: UserRead
